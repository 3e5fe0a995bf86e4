# src/querymod/modifiers/eager.py
from ..core.errors import InvalidRelationError, NoDataError
from ..core.logging import color_palette, log
from .base import BaseModifier


class WithModifier(BaseModifier):
    """Eager-loads the relations named in the `with` parameter."""

    name = "with"

    def modify(self):
        parameter = self.config.with_

        if not self.has_parameter(parameter):
            return self.builder

        relations = list(dict.fromkeys(self.list_to_array(self.data[parameter])))
        if not relations:
            raise NoDataError(parameter)

        for name in relations:
            if self.builder.try_get_relation(name) is None:
                raise InvalidRelationError(name, self.builder.model_name)

        log.debug(f"with {', '.join(color_palette['relation'](r) for r in relations)}")
        return self.builder.with_(relations)
