# src/querymod/core/query/builder.py
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import String, and_, cast, false, func, inspect, or_, select
from sqlalchemy.orm import RelationshipProperty, load_only, selectinload
from sqlalchemy.sql import ColumnElement, Select

from ..config import SearchMode
from ..errors import (
    InvalidFieldError,
    InvalidOperatorError,
    InvalidParameterError,
    InvalidRelationError,
    SearchNotSupportedError,
)
from .operators import OPERATOR_MAP, compare, normalize_count_operator, normalize_operator

DIRECTIONS = ("asc", "desc")


class QueryBuilder(Protocol):
    """
    Capabilities the modifiers need from a query builder.

    Every mutating call returns the builder so stages can be written as
    `builder = builder.where(...)`.
    """

    @property
    def model_name(self) -> str: ...

    @property
    def table_identifier(self) -> str: ...

    def where(self, field: str, operator: str, value: Any) -> "QueryBuilder": ...

    def or_where(self, field: str, operator: str, value: Any) -> "QueryBuilder": ...

    def where_in(self, field: str, values: Sequence[Any]) -> "QueryBuilder": ...

    def where_not_in(self, field: str, values: Sequence[Any]) -> "QueryBuilder": ...

    def order_by(self, field: str, direction: str = "asc") -> "QueryBuilder": ...

    def limit(self, count: int) -> "QueryBuilder": ...

    def offset(self, count: int) -> "QueryBuilder": ...

    def select(self, fields: Sequence[str]) -> "QueryBuilder": ...

    def with_(self, relations: Sequence[str]) -> "QueryBuilder": ...

    def has(self, relation: str, operator: str = ">=", count: int = 1) -> "QueryBuilder": ...

    def where_has(
        self,
        relation: str,
        callback: Callable[["QueryBuilder"], "QueryBuilder"],
        operator: str = ">=",
        count: int = 1,
    ) -> "QueryBuilder": ...

    def get_relation(self, name: str) -> Any: ...

    def related_table_identifier(self, relation: str) -> str: ...

    def try_get_relation(self, name: str) -> Optional[Any]: ...

    def supports_search(self) -> bool: ...

    def search(
        self, term: str, mode: SearchMode, scope: Optional[Sequence[str]] = None
    ) -> "QueryBuilder": ...


def escape_like(term: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so the term is matched literally."""
    return (
        term.replace(escape, escape * 2).replace("%", f"{escape}%").replace("_", f"{escape}_")
    )


class SqlAlchemyBuilder:
    """
    Builds a SQLAlchemy `Select` for a mapped class from modifier calls.

    Comparison clauses (`where` / `or_where`) are collected in call order
    together with the boolean that joins them to the previous comparison.
    They are folded when `statement` is read, with AND binding tighter than
    OR, so `where(a).or_where(b).where(c)` renders as `a OR (b AND c)`.
    Set, relation and search clauses are constraints: each is AND-ed with the
    whole comparison group, never with a single OR branch. Criteria already
    present on the initial statement stay AND-ed around everything.
    """

    def __init__(self, model: type, statement: Optional[Select] = None):
        self.model = model
        self.mapper = inspect(model)
        self._statement = statement if statement is not None else select(model)
        self._wheres: List[Tuple[str, ColumnElement]] = []
        self._constraints: List[ColumnElement] = []
        self._order_by: List[ColumnElement] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._fields: Optional[List[Any]] = None
        self._eager: List[str] = []

    # ===== Identity =====

    @property
    def model_name(self) -> str:
        return self.model.__name__

    @property
    def table(self):
        return self.mapper.persist_selectable

    @property
    def table_identifier(self) -> str:
        table = self.mapper.local_table
        return f"{table.schema}.{table.name}" if table.schema else table.name

    # ===== Filtering =====

    def where(self, field: str, operator: str, value: Any) -> "SqlAlchemyBuilder":
        self._wheres.append(("and", self._comparison(field, operator, value)))
        return self

    def or_where(self, field: str, operator: str, value: Any) -> "SqlAlchemyBuilder":
        self._wheres.append(("or", self._comparison(field, operator, value)))
        return self

    def where_in(self, field: str, values: Sequence[Any]) -> "SqlAlchemyBuilder":
        self._constraints.append(self._column(field).in_(list(values)))
        return self

    def where_not_in(self, field: str, values: Sequence[Any]) -> "SqlAlchemyBuilder":
        self._constraints.append(self._column(field).not_in(list(values)))
        return self

    # ===== Ordering, paging and projection =====

    def order_by(self, field: str, direction: str = "asc") -> "SqlAlchemyBuilder":
        if direction not in DIRECTIONS:
            raise InvalidParameterError("direction", direction)
        column = self._column(field)
        self._order_by.append(column.desc() if direction == "desc" else column.asc())
        return self

    def limit(self, count: int) -> "SqlAlchemyBuilder":
        self._limit = count
        return self

    def offset(self, count: int) -> "SqlAlchemyBuilder":
        self._offset = count
        return self

    def select(self, fields: Sequence[str]) -> "SqlAlchemyBuilder":
        self._fields = [self._attribute(field) for field in fields]
        return self

    def with_(self, relations: Sequence[str]) -> "SqlAlchemyBuilder":
        for name in relations:
            self.get_relation(name)
            if name not in self._eager:
                self._eager.append(name)
        return self

    # ===== Relations =====

    def get_relation(self, name: str) -> RelationshipProperty:
        relation = self.try_get_relation(name)
        if relation is None:
            raise InvalidRelationError(name, self.model_name)
        return relation

    def try_get_relation(self, name: str) -> Optional[RelationshipProperty]:
        if not isinstance(name, str):
            return None
        return self.mapper.relationships.get(name)

    def related_table_identifier(self, relation: str) -> str:
        table = self.get_relation(relation).mapper.local_table
        return f"{table.schema}.{table.name}" if table.schema else table.name

    def has(self, relation: str, operator: str = ">=", count: int = 1) -> "SqlAlchemyBuilder":
        self._constraints.append(self._relation_clause(relation, operator, count))
        return self

    def where_has(
        self,
        relation: str,
        callback: Callable[[Any], Any],
        operator: str = ">=",
        count: int = 1,
    ) -> "SqlAlchemyBuilder":
        prop = self.get_relation(relation)
        related = SqlAlchemyBuilder(prop.mapper.class_)
        related = callback(related) or related
        clause = self._relation_clause(relation, operator, count, related.criteria())
        self._constraints.append(clause)
        return self

    # ===== Search =====

    def supports_search(self) -> bool:
        return bool(getattr(self.model, "__searchable__", None))

    def search(
        self, term: str, mode: SearchMode, scope: Optional[Sequence[str]] = None
    ) -> "SqlAlchemyBuilder":
        if not self.supports_search():
            raise SearchNotSupportedError(self.model_name)

        mode = SearchMode(mode)
        columns = [
            self._column(name)
            for name in self.model.__searchable__
            if scope is None or name in scope
        ]

        pattern = escape_like(term)
        if mode is SearchMode.WILDCARD and "*" in term:
            pattern = pattern.replace("*", "%")
        else:
            pattern = f"%{pattern}%"

        if not columns:
            self._constraints.append(false())
            return self

        conditions = [
            (column if isinstance(column.type, String) else cast(column, String)).ilike(
                pattern, escape="\\"
            )
            for column in columns
        ]
        self._constraints.append(or_(*conditions).self_group())
        return self

    # ===== Output =====

    def criteria(self) -> Optional[ColumnElement]:
        """Fold the collected clauses into a single boolean expression."""
        comparisons = self._comparisons()
        clauses = [*self._constraints, *([comparisons] if comparisons is not None else [])]
        if not clauses:
            return None
        return clauses[0] if len(clauses) == 1 else and_(*clauses)

    def _comparisons(self) -> Optional[ColumnElement]:
        groups: List[List[ColumnElement]] = []
        for boolean, clause in self._wheres:
            if boolean == "or" or not groups:
                groups.append([clause])
            else:
                groups[-1].append(clause)

        if not groups:
            return None

        conjunctions = [group[0] if len(group) == 1 else and_(*group) for group in groups]
        if len(conjunctions) == 1:
            return conjunctions[0]
        return or_(*conjunctions).self_group()

    @property
    def statement(self) -> Select:
        """The final `Select`, ready to be executed by the caller."""
        statement = self._statement

        criteria = self.criteria()
        if criteria is not None:
            statement = statement.where(criteria)
        if self._order_by:
            statement = statement.order_by(*self._order_by)
        if self._limit is not None:
            statement = statement.limit(self._limit)
        if self._offset is not None:
            statement = statement.offset(self._offset)
        if self._fields:
            statement = statement.options(load_only(*self._fields))
        for name in self._eager:
            statement = statement.options(selectinload(getattr(self.model, name)))

        return statement

    # ===== Helper Methods =====

    def _column(self, field: str) -> ColumnElement:
        column = self.table.c.get(field) if isinstance(field, str) else None
        if column is None:
            raise InvalidFieldError(str(field))
        return column

    def _attribute(self, field: str) -> Any:
        column = self._column(field)
        prop = self.mapper.get_property_by_column(column)
        return getattr(self.model, prop.key)

    def _comparison(self, field: str, operator: str, value: Any) -> ColumnElement:
        operator = normalize_operator(operator)
        if operator not in OPERATOR_MAP:
            raise InvalidOperatorError(operator)
        return compare(self._column(field), operator, value)

    def _relation_clause(
        self,
        name: str,
        operator: str,
        count: int,
        criteria: Optional[ColumnElement] = None,
    ) -> ColumnElement:
        prop = self.get_relation(name)
        operator = normalize_count_operator(operator)
        attribute = getattr(self.model, prop.key)
        exists = attribute.any if prop.uselist else attribute.has

        if (operator, count) in ((">=", 1), (">", 0)):
            return exists(criteria)
        if (operator, count) in (("<", 1), ("=", 0)):
            return ~exists(criteria)

        target = prop.mapper.persist_selectable
        if prop.secondary is not None:
            counter = (
                select(func.count())
                .select_from(prop.secondary)
                .join(target, prop.secondaryjoin)
                .where(prop.primaryjoin)
            )
        else:
            counter = select(func.count()).select_from(target).where(prop.primaryjoin)

        if criteria is not None:
            counter = counter.where(criteria)

        counter = counter.correlate(self.table).scalar_subquery()
        return compare(counter, operator, count)
