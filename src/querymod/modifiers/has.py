# src/querymod/modifiers/has.py
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

from ..core.config import QueryConfig
from ..core.decoders import JsonDecoder
from ..core.errors import InvalidFieldError, InvalidRelationError, MalformedFilterError
from ..core.logging import color_palette, log
from ..core.query.expressions import FilterCountQuery, FilterQuery
from .base import BaseModifier
from .filter import FilterModifier

COUNT_KEY = "count"


class SubQuery(NamedTuple):
    """Constraint keys of one relation, checked and parsed ahead of time."""

    data: Dict[str, Any]
    config: QueryConfig
    queries: List[Tuple[str, FilterQuery]]


class HasModifier(BaseModifier):
    """
    Adds relation existence / relation count constraints.

    The `has` parameter is either a list of relation names (`"comments,tags"`)
    or a map of relation name to constraint object:

        {"comments": {"count": {"operator": ">", "value": 5}, "approved": "1"}}

    `count` sets the operator and value of the count check (default `>= 1`).
    Any other keys filter the related rows, using the related table's own
    column whitelist.
    """

    name = "has"

    def modify(self):
        raw = self.data.get(self.config.has)
        if self.is_empty(raw):
            return self.builder

        has_queries = self.fetch_values_from_data(raw)
        if not has_queries:
            return self.builder

        # Every relation and sub-query is checked before any clause is added
        for name in has_queries:
            if self.builder.try_get_relation(name) is None:
                raise InvalidRelationError(name, self.builder.model_name)

        filters: List[Tuple[str, FilterCountQuery, Optional[SubQuery]]] = []
        for name, query in has_queries.items():
            query = dict(query)
            count_query = FilterCountQuery.from_raw(query.pop(COUNT_KEY, None), name)
            sub_query = self.prepare_sub_query(name, query) if query else None
            filters.append((name, count_query, sub_query))

        for name, count_query, sub_query in filters:
            self.add_has_filter(name, count_query, sub_query)

        return self.builder

    def add_has_filter(
        self, name: str, count_query: FilterCountQuery, sub_query: Optional[SubQuery]
    ) -> None:
        log.debug(
            f"has {color_palette['relation'](name)} "
            f"{color_palette['operator'](count_query.operator)} {count_query.value}"
        )
        if sub_query is None:
            self.builder = self.builder.has(name, count_query.operator, count_query.value)
            return

        with log.indented():
            self.builder = self.builder.where_has(
                name,
                self.build_sub_query(sub_query),
                count_query.operator,
                count_query.value,
            )

    def prepare_sub_query(self, name: str, query: Dict[str, Any]) -> SubQuery:
        """Check and parse the constraint keys against the related table's whitelist."""
        config = self.config.for_relation(self.builder.related_table_identifier(name))
        for field in query:
            if not config.is_filterable(field):
                raise InvalidFieldError(f"{name}.{field}")

        parsed = FilterModifier(query, self.builder, config).parse_all()
        return SubQuery(query, config, parsed)

    @staticmethod
    def build_sub_query(sub_query: SubQuery) -> Callable[[Any], Any]:
        """Callback filtering the related rows with the prepared clauses."""

        def apply(related):
            modifier = FilterModifier(sub_query.data, related, sub_query.config)
            return modifier.emit(sub_query.queries)

        return apply

    # ===== Parsing =====

    def fetch_values_from_data(self, raw: Any) -> Dict[str, Dict[str, Any]]:
        """Normalize the `has` parameter into `{relation: constraint}`."""
        if isinstance(raw, str):
            decoder = JsonDecoder()
            if decoder.decode(raw):
                raw = decoder.get_data()
            else:
                return {name: {} for name in self.list_to_array(raw)}

        if isinstance(raw, (list, tuple)):
            for item in raw:
                if item is not None and not isinstance(item, str):
                    raise InvalidRelationError(repr(item))
            return {name: {} for name in self.list_to_array(raw)}

        if not isinstance(raw, Mapping):
            raise InvalidRelationError(str(raw))

        queries: Dict[str, Dict[str, Any]] = {}
        for key, constraint in raw.items():
            # has[0]=comments (bracket lists) carry the name as the value
            if isinstance(key, str) and key.isdigit() and isinstance(constraint, str):
                for name in self.list_to_array(constraint):
                    queries[name] = {}
                continue
            queries[key] = self.parse_constraint(key, constraint)
        return queries

    def parse_constraint(self, name: str, constraint: Any) -> Dict[str, Any]:
        if constraint is None or constraint is True or constraint == name:
            return {}

        if isinstance(constraint, str):
            if not constraint.strip():
                return {}
            decoder = JsonDecoder()
            if decoder.decode(constraint) and isinstance(decoder.get_data(), dict):
                return decoder.get_data()
            raise MalformedFilterError(name, "relation constraints must be objects.")

        if isinstance(constraint, Mapping):
            return dict(constraint)

        raise MalformedFilterError(name, "relation constraints must be objects.")
