"""Modifier units: one pipeline stage per query concern."""

from types import MappingProxyType

from querymod.modifiers.base import BaseModifier
from querymod.modifiers.eager import WithModifier
from querymod.modifiers.fields import FieldSelectionModifier
from querymod.modifiers.filter import FilterModifier
from querymod.modifiers.has import HasModifier
from querymod.modifiers.paging import PagingModifier
from querymod.modifiers.search import SearchModifier
from querymod.modifiers.sort import SortModifier

# Process-wide name -> class registry, read-only after import
MODIFIER_REGISTRY = MappingProxyType({
    modifier.name: modifier
    for modifier in (
        FieldSelectionModifier,
        FilterModifier,
        SortModifier,
        PagingModifier,
        SearchModifier,
        HasModifier,
        WithModifier,
    )
})

DEFAULT_MODIFIERS = (
    FieldSelectionModifier,
    FilterModifier,
    SortModifier,
    PagingModifier,
    SearchModifier,
    HasModifier,
)

__all__ = [
    "BaseModifier",
    "FieldSelectionModifier",
    "FilterModifier",
    "SortModifier",
    "PagingModifier",
    "SearchModifier",
    "HasModifier",
    "WithModifier",
    "MODIFIER_REGISTRY",
    "DEFAULT_MODIFIERS",
]
