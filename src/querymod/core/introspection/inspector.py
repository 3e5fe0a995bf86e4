# src/querymod/core/introspection/inspector.py
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import MetaData, inspect
from sqlalchemy.engine import Connection, Engine

from ..logging import color_palette, log


def split_table_identifier(table: str) -> Tuple[Optional[str], str]:
    """Split `"schema.table"` into its parts; the schema is optional."""
    schema, _, name = table.rpartition(".")
    return (schema or None), name


class SqlAlchemyIntrospector:
    """
    Lists table columns from a live database or a declared `MetaData`.

    Results are cached per table identifier, so one introspector can be
    shared by every request that targets the same schema snapshot.
    """

    def __init__(self, source: Union[Engine, Connection, MetaData]):
        self.source = source
        self._cache: Dict[str, List[str]] = {}

    def list_columns(self, table: str) -> List[str]:
        if table not in self._cache:
            self._cache[table] = self._load_columns(table)
        return list(self._cache[table])

    def clear_cache(self) -> None:
        self._cache.clear()

    def _load_columns(self, table: str) -> List[str]:
        schema, table_name = split_table_identifier(table)

        if isinstance(self.source, MetaData):
            key = f"{schema}.{table_name}" if schema else table_name
            found = self.source.tables.get(key)
            columns = [column.name for column in found.columns] if found is not None else []
        else:
            inspector = inspect(self.source)
            if not inspector.has_table(table_name, schema=schema):
                columns = []
            else:
                columns = [col["name"] for col in inspector.get_columns(table_name, schema)]

        if not columns:
            log.warn(f"No columns found for table {color_palette['model'](table)}")
        else:
            log.debug(f"Introspected {len(columns)} columns for {color_palette['model'](table)}")
        return columns
