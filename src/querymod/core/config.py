# src/querymod/core/config.py
"""Per-request configuration for the modifier pipeline."""

from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import UnknownModifierError
from .logging import color_palette, log


class FilterType(str, Enum):
    """How successive comparison clauses of the filter stage are combined."""

    AND = "and"
    OR = "or"

    @classmethod
    def _missing_(cls, value: object) -> Optional["FilterType"]:
        if isinstance(value, str):
            token = value.strip().lower()
            legacy = {"andwhere": cls.AND, "orwhere": cls.OR}
            if token in legacy:
                return legacy[token]
            for member in cls:
                if member.value == token:
                    return member
        return None


class SearchMode(str, Enum):
    """Scope of the free-text search stage."""

    COLUMN_LIMITED = "column_limited"
    WILDCARD = "wildcard"


class ColumnLister(Protocol):
    """Schema collaborator: lists the column names of a table."""

    def list_columns(self, table: str) -> Sequence[str]: ...


ModifierRef = Union[str, type]


def _default_modifiers() -> List[type]:
    from ..modifiers import DEFAULT_MODIFIERS

    return list(DEFAULT_MODIFIERS)


def resolve_modifier(modifier: ModifierRef) -> type:
    """Resolve a registered modifier name (or a modifier class) to its class."""
    from ..modifiers import MODIFIER_REGISTRY, BaseModifier

    if isinstance(modifier, str):
        try:
            return MODIFIER_REGISTRY[modifier]
        except KeyError:
            raise UnknownModifierError(modifier) from None

    if isinstance(modifier, type) and issubclass(modifier, BaseModifier):
        return modifier

    raise UnknownModifierError(repr(modifier))


class QueryConfig(BaseModel):
    """
    Parameter names, filter whitelist and modifier list for one request.

    The whitelist is never taken from the request: it is filled from live
    schema metadata with `populate_filterable_fields`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    # Names of the request parameters each stage reads
    sort: str = "sort"
    fields: str = "fields"
    limit: str = "limit"
    page: str = "page"
    search: str = "q"
    has: str = "has"
    with_: str = "with"

    filterable_fields: Dict[str, str] = Field(default_factory=dict)
    filter_type: FilterType = FilterType.AND
    search_mode: SearchMode = SearchMode.COLUMN_LIMITED

    default_limit: Optional[int] = Field(default=None, ge=1)
    max_limit: Optional[int] = Field(default=None, ge=1)

    modifiers: List[Any] = Field(default_factory=_default_modifiers)
    introspector: Optional[Any] = Field(default=None, exclude=True, repr=False)

    @field_validator("modifiers")
    @classmethod
    def _resolve_modifiers(cls, value: List[Any]) -> List[type]:
        return [resolve_modifier(modifier) for modifier in value]

    # ===== Whitelist =====

    def populate_filterable_fields(
        self, table: str, introspector: ColumnLister
    ) -> "QueryConfig":
        """Whitelist every column of `table` reported by the introspector."""
        columns = introspector.list_columns(table)
        self.filterable_fields = {**self.filterable_fields, **{c: c for c in columns}}
        self.introspector = introspector
        return self

    def is_filterable(self, field: Any) -> bool:
        return isinstance(field, str) and field in self.filterable_fields

    def for_relation(self, table: str) -> "QueryConfig":
        """Copy of this config whose whitelist covers a related table."""
        derived = self.model_copy(update={"filterable_fields": {}})
        if self.introspector is None:
            log.warn(
                f"No introspector to whitelist {color_palette['model'](table)}: "
                "relation sub-queries need populate_filterable_fields() on the parent config"
            )
            return derived
        return derived.populate_filterable_fields(table, self.introspector)

    # ===== Modifiers =====

    def add_modifier(self, modifier: ModifierRef) -> "QueryConfig":
        self.modifiers = [*self.modifiers, resolve_modifier(modifier)]
        return self

    def remove_modifier(self, modifier: ModifierRef) -> bool:
        """Remove the first matching modifier; False when it is not registered."""
        try:
            target = resolve_modifier(modifier)
        except UnknownModifierError:
            return False

        if target not in self.modifiers:
            return False

        modifiers = list(self.modifiers)
        modifiers.remove(target)
        self.modifiers = modifiers
        return True
