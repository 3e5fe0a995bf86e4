# src/querymod/modifiers/filter.py
from typing import Any, List, Mapping, Tuple

from ..core.config import FilterType
from ..core.decoders import JsonDecoder
from ..core.errors import MalformedFilterError
from ..core.logging import color_palette, log
from ..core.query.expressions import FilterQuery
from ..core.query.operators import EXCLUDE, INCLUDE
from .base import BaseModifier

EXPRESSION_KEYS = frozenset({"value", "operator"})
SCALAR_TYPES = (str, int, float, bool)


class FilterModifier(BaseModifier):
    """
    Adds where / whereIn / whereNotIn clauses for whitelisted fields.

    A field's raw value can take three shapes:

    - a mapping with `value` and/or `operator` keys: one filter expression
    - a list (or a mapping without those keys): a whereIn over its items
    - a scalar: JSON-decoded when it holds an object, else taken literally

    Every value is parsed before the first clause is added, so a malformed
    field leaves the builder untouched.
    """

    name = "filter"

    def __init__(self, data, builder, config):
        super().__init__(data, builder, config)
        self.filter_type = self.config.filter_type
        self._first = True

    def modify(self):
        return self.emit(self.parse_all())

    def parse_all(self) -> List[Tuple[str, FilterQuery]]:
        """Parse and check every whitelisted field without touching the builder."""
        queries: List[Tuple[str, FilterQuery]] = []
        for field in self.config.filterable_fields:
            if field not in self.data or self.is_empty(self.data[field]):
                continue

            query = self.parse_query(field, self.data[field])
            if query.value is not None:
                queries.append((field, self._checked(field, query)))
        return queries

    def emit(self, queries: List[Tuple[str, FilterQuery]]):
        for field, query in queries:
            self.add_where_type(field, query.operator, query.value)
        return self.builder

    # ===== Parsing =====

    def parse_query(self, field: str, value: Any) -> FilterQuery:
        if isinstance(value, FilterQuery):
            return value

        if isinstance(value, Mapping):
            if self.is_expression(field, value):
                return FilterQuery.model_validate(dict(value))
            return self.where_in_query(field, list(value.values()))

        if isinstance(value, (list, tuple)):
            return self.where_in_query(field, list(value))

        if isinstance(value, str):
            decoder = JsonDecoder()
            if decoder.decode(value):
                decoded = decoder.get_data()
                if isinstance(decoded, list):
                    return self.where_in_query(field, decoded)
                if self.is_expression(field, decoded):
                    return FilterQuery(
                        value=decoded.get("value"), operator=decoded.get("operator")
                    )
                return FilterQuery()

        return FilterQuery(value=value)

    @staticmethod
    def is_expression(field: str, value: Mapping) -> bool:
        """
        True when the mapping is an `{operator, value}` expression.

        A mapping mixing expression keys with any other keys is ambiguous
        (array or expression?) and is rejected.
        """
        keys = set(value)
        if not keys & EXPRESSION_KEYS:
            return False
        if keys - EXPRESSION_KEYS:
            raise MalformedFilterError(field)
        return True

    def where_in_query(self, field: str, values: List[Any]) -> FilterQuery:
        for item in values:
            if item is not None and not isinstance(item, SCALAR_TYPES):
                raise MalformedFilterError(field, "whereIn values must be scalars.")
        return FilterQuery(operator=INCLUDE, value=values)

    def _checked(self, field: str, query: FilterQuery) -> FilterQuery:
        """Make sure the value shape fits the operator."""
        value = query.value

        if query.operator in (INCLUDE, EXCLUDE):
            if isinstance(value, Mapping):
                value = list(value.values())
            elif not isinstance(value, (list, tuple)):
                value = [value]
            self.where_in_query(field, list(value))
            return query.model_copy(update={"value": list(value)})

        if not isinstance(value, SCALAR_TYPES):
            raise MalformedFilterError(
                field,
                f"operator '{query.operator}' takes a single value; "
                "use include/exclude for lists.",
            )
        return query

    # ===== Clauses =====

    def add_where_type(self, field: str, operator: str, value: Any) -> None:
        if operator == INCLUDE:
            log.debug(f"{color_palette['field'](field)} in {color_palette['value'](value)}")
            self.builder = self.builder.where_in(field, value)
        elif operator == EXCLUDE:
            log.debug(f"{color_palette['field'](field)} not in {color_palette['value'](value)}")
            self.builder = self.builder.where_not_in(field, value)
        else:
            self.add_standard_where(field, operator, value)

    def add_standard_where(self, field: str, operator: str, value: Any) -> None:
        if operator == "==":
            operator = "="

        if self.filter_type is FilterType.OR and not self._first:
            log.debug(
                f"or {color_palette['field'](field)} "
                f"{color_palette['operator'](operator)} {color_palette['value'](value)}"
            )
            self.builder = self.builder.or_where(field, operator, value)
        else:
            log.debug(
                f"{color_palette['field'](field)} "
                f"{color_palette['operator'](operator)} {color_palette['value'](value)}"
            )
            self.builder = self.builder.where(field, operator, value)
            self._first = False
