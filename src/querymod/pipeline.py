# src/querymod/pipeline.py
"""Runs the configured modifier stages over one builder."""

from types import MappingProxyType
from typing import Any, Mapping, Optional

from sqlalchemy.sql import Select

from .core.config import ColumnLister, QueryConfig
from .core.logging import color_palette, log
from .core.query.builder import QueryBuilder, SqlAlchemyBuilder


def apply(
    params: Mapping[str, Any],
    builder: QueryBuilder,
    config: Optional[QueryConfig] = None,
) -> QueryBuilder:
    """
    Apply every configured modifier, in order, to the builder.

    The parameter map is frozen for the run; each stage receives the builder
    returned by the previous one. The first error raised by a stage aborts
    the run.

    Args:
        params: Raw request parameters (scalars, lists or nested maps)
        builder: The builder to mutate
        config: Parameter names, whitelist and modifier list

    Returns:
        The mutated builder
    """
    config = config if config is not None else QueryConfig()
    data = MappingProxyType(dict(params))

    log.section(f"Modifying {color_palette['model'](builder.model_name)} query")
    for modifier in config.modifiers:
        log.debug(f"Running {color_palette['modifier'](modifier.name or modifier.__name__)}")
        with log.indented():
            builder = modifier(data, builder, config).modify()

    return builder


def build_statement(
    params: Mapping[str, Any],
    model: type,
    introspector: ColumnLister,
    config: Optional[QueryConfig] = None,
    statement: Optional[Select] = None,
) -> Select:
    """
    Build a `Select` for a mapped class straight from request parameters.

    The whitelist is populated from the introspector for the model's table.
    Criteria already on `statement` (ownership filters, for example) stay
    AND-ed around everything the request adds.
    """
    builder = SqlAlchemyBuilder(model, statement)
    config = config if config is not None else QueryConfig()
    config.populate_filterable_fields(builder.table_identifier, introspector)
    return apply(params, builder, config).statement
