# src/querymod/modifiers/base.py
from abc import ABC, abstractmethod
from typing import Any, List, Mapping

from ..core.config import QueryConfig
from ..core.query.builder import QueryBuilder


class BaseModifier(ABC):
    """
    One pipeline stage: reads the raw parameters and mutates the builder.

    A modifier instance lives for a single `modify()` call. It never keeps
    the builder once the call returns.
    """

    # Registry name, also used in log output
    name: str = ""

    def __init__(self, data: Mapping[str, Any], builder: QueryBuilder, config: QueryConfig):
        self.data = data
        self.builder = builder
        self.config = config

    @abstractmethod
    def modify(self) -> QueryBuilder:
        """Apply this stage and return the (possibly mutated) builder."""

    @classmethod
    def apply(
        cls, data: Mapping[str, Any], builder: QueryBuilder, config: QueryConfig
    ) -> QueryBuilder:
        return cls(data, builder, config).modify()

    # ===== Helper Methods =====

    def has_parameter(self, parameter: str) -> bool:
        return parameter in self.data

    @staticmethod
    def is_empty(value: Any) -> bool:
        """True for values that carry no data: None, blank strings, empty containers."""
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        if isinstance(value, (list, tuple, Mapping)):
            return len(value) == 0
        return False

    @staticmethod
    def list_to_array(value: Any) -> List[str]:
        """
        Turn a comma separated list (or a sequence of them) into trimmed items.

        `"a, b"`, `["a", "b"]` and `["a,b"]` all give `["a", "b"]`; blank
        items are dropped.
        """
        if value is None:
            return []
        if isinstance(value, Mapping):
            value = list(value.values())
        if not isinstance(value, (list, tuple)):
            value = [value]

        items: List[str] = []
        for entry in value:
            if entry is None:
                continue
            items.extend(part.strip() for part in str(entry).split(","))
        return [item for item in items if item]
