# src/querymod/modifiers/fields.py
from ..core.errors import NoDataError
from ..core.logging import color_palette, log
from .base import BaseModifier


class FieldSelectionModifier(BaseModifier):
    """
    Restricts the selected columns to the comma separated `fields` list.

    Names are passed through unvalidated; rejecting unknown columns is up to
    the builder.
    """

    name = "fields"

    def modify(self):
        parameter = self.config.fields

        if not self.has_parameter(parameter):
            return self.builder

        fields = list(dict.fromkeys(self.list_to_array(self.data[parameter])))
        if not fields:
            raise NoDataError(parameter)

        log.debug(f"select {', '.join(color_palette['field'](f) for f in fields)}")
        return self.builder.select(fields)
