# src/querymod/modifiers/sort.py
from typing import Tuple

from ..core.errors import InvalidFieldError, NoDataError
from ..core.logging import color_palette, log
from .base import BaseModifier


class SortModifier(BaseModifier):
    """Orders by a comma separated list of fields; a leading `-` sorts descending."""

    name = "sort"

    def modify(self):
        parameter = self.config.sort

        if not self.has_parameter(parameter):
            return self.builder

        tokens = self.list_to_array(self.data[parameter])
        if not tokens:
            raise NoDataError(parameter)

        orderings = [self.parse_token(token) for token in tokens]

        for field, direction in orderings:
            log.debug(f"order by {color_palette['field'](field)} {direction}")
            self.builder = self.builder.order_by(field, direction)

        return self.builder

    def parse_token(self, token: str) -> Tuple[str, str]:
        direction = "asc"
        if token.startswith("-"):
            direction = "desc"
            token = token[1:]
        elif token.startswith("+"):
            token = token[1:]

        field = token.strip()
        if not self.config.is_filterable(field):
            raise InvalidFieldError(field)

        return field, direction
