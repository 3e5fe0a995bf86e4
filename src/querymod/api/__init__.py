"""FastAPI integration: request parameter parsing and error responses."""

from querymod.api.errors import query_modifier_error_handler, register_error_handlers
from querymod.api.params import parse_query_params, query_params

__all__ = [
    "parse_query_params",
    "query_params",
    "query_modifier_error_handler",
    "register_error_handlers",
]
