# src/querymod/modifiers/search.py
from ..core.config import SearchMode
from ..core.errors import InvalidParameterError, SearchNotSupportedError
from ..core.logging import color_palette, log
from .base import BaseModifier


class SearchModifier(BaseModifier):
    """
    Free-text search through the builder's search capability.

    In column-limited mode the search scope is the filter whitelist; in
    wildcard mode the builder decides the scope. A blank term is a no-op.
    """

    name = "search"

    def modify(self):
        parameter = self.config.search

        if not self.has_parameter(parameter):
            return self.builder

        term = self.data[parameter]
        if isinstance(term, (list, tuple)):
            term = " ".join(str(part) for part in term if part is not None)
        elif isinstance(term, (int, float)) and not isinstance(term, bool):
            term = str(term)
        if self.is_empty(term):
            return self.builder
        if not isinstance(term, str):
            raise InvalidParameterError(parameter, term, "a non-text search term")

        if not self.builder.supports_search():
            raise SearchNotSupportedError(self.builder.model_name)

        mode = self.config.search_mode
        scope = list(self.config.filterable_fields) if mode is SearchMode.COLUMN_LIMITED else None

        log.debug(f"search {color_palette['value'](term.strip())} ({mode.value})")
        return self.builder.search(term.strip(), mode, scope)
