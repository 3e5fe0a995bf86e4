# src/querymod/core/errors.py
"""Exception classes raised while applying request parameters to a query."""

from typing import Any, Optional


class QueryModifierError(Exception):
    """Base exception for all querymod errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoDataError(QueryModifierError):
    """Raised when a parameter is present but carries no usable data."""

    def __init__(self, parameter: str):
        super().__init__(
            f"Query parameter '{parameter}' provided, but contains no data."
        )
        self.parameter = parameter


class InvalidFieldError(QueryModifierError):
    """Raised when a field name is not a known, whitelisted column."""

    def __init__(self, field: str):
        super().__init__(f"Query string parameter contains an invalid field: {field}")
        self.field = field


class InvalidRelationError(QueryModifierError):
    """Raised when a relation name does not exist on the model."""

    def __init__(self, relation: str, model: Optional[str] = None):
        message = f"Query string parameter contains an invalid relation: {relation}"
        if model:
            message = f"{message} (model {model})"
        super().__init__(message)
        self.relation = relation
        self.model = model


class MalformedFilterError(QueryModifierError):
    """Raised when a filter value has a conflicting or unusable shape."""

    def __init__(self, field: str, reason: Optional[str] = None):
        message = reason or (
            "Field value must be an object, not an array. "
            "Arrays are supported but only for whereIn queries."
        )
        super().__init__(f"Malformed filter for field '{field}': {message}")
        self.field = field


class SearchNotSupportedError(QueryModifierError):
    """Raised when search is requested on a model without search capability."""

    def __init__(self, model: str):
        super().__init__(
            f"{model} does not support search. "
            "To enable search for this model declare a __searchable__ "
            "sequence of column names on it."
        )
        self.model = model


class InvalidParameterError(QueryModifierError):
    """Raised when a parameter value is non-numeric or out of range."""

    def __init__(self, parameter: str, value: Any, reason: str = "invalid value"):
        super().__init__(f"Query parameter '{parameter}' has {reason}: {value!r}")
        self.parameter = parameter
        self.value = value


class InvalidOperatorError(QueryModifierError):
    """Raised when an operator token is outside the supported set."""

    def __init__(self, operator: Any):
        super().__init__(f"Unsupported filter operator: {operator!r}")
        self.operator = operator


class UnknownModifierError(QueryModifierError):
    """Raised when a modifier name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"No modifier registered under the name '{name}'")
        self.name = name
