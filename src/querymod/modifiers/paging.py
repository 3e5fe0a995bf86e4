# src/querymod/modifiers/paging.py
from typing import Any, Optional

from ..core.errors import InvalidParameterError, NoDataError
from ..core.logging import log
from .base import BaseModifier


class PagingModifier(BaseModifier):
    """
    Applies limit and offset from the `limit` and `page` parameters.

    Without a `limit` parameter the configured `default_limit` is used; when
    neither exists the builder keeps its own limiting behaviour and `page` is
    ignored. Pages start at 1.
    """

    name = "paging"

    def modify(self):
        limit = self.read_integer(self.config.limit)
        page = self.read_integer(self.config.page) or 1

        if limit is None:
            limit = self.config.default_limit
        if limit is None:
            return self.builder

        max_limit = self.config.max_limit
        if max_limit is not None and limit > max_limit:
            raise InvalidParameterError(
                self.config.limit, limit, f"a value above the maximum of {max_limit}"
            )

        offset = (page - 1) * limit
        log.debug(f"limit {limit} offset {offset} (page {page})")

        self.builder = self.builder.limit(limit)
        self.builder = self.builder.offset(offset)
        return self.builder

    def read_integer(self, parameter: str) -> Optional[int]:
        """Read a positive integer parameter; None when it is absent."""
        if not self.has_parameter(parameter):
            return None

        raw = self.data[parameter]
        if self.is_empty(raw):
            raise NoDataError(parameter)

        number = self.to_integer(raw)
        if number is None:
            raise InvalidParameterError(parameter, raw, "a non-numeric value")
        if number <= 0:
            raise InvalidParameterError(parameter, raw, "a value below 1")
        return number

    @staticmethod
    def to_integer(raw: Any) -> Optional[int]:
        if isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float):
            return int(raw) if raw.is_integer() else None
        if isinstance(raw, str):
            try:
                return int(raw.strip())
            except ValueError:
                return None
        return None
