# src/querymod/core/query/expressions.py
"""Value objects describing a parsed filter clause or relation-count clause."""

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidParameterError
from .operators import normalize_count_operator, normalize_operator


class FilterQuery(BaseModel):
    """A single `{operator, value}` filter expression for one field."""

    model_config = ConfigDict(extra="ignore")

    value: Any = None
    operator: str = "="

    @field_validator("operator", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> str:
        if value is None:
            return "="
        return normalize_operator(value)


class FilterCountQuery(BaseModel):
    """
    Count constraint for a relation filter.

    Defaults to "at least one related row" (`>= 1`).
    """

    model_config = ConfigDict(extra="ignore")

    value: int = Field(default=1, ge=0)
    operator: str = ">="

    @field_validator("operator", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> str:
        if value is None:
            return ">="
        return normalize_count_operator(value)

    @field_validator("value", mode="before")
    @classmethod
    def _default_value(cls, value: Any) -> Any:
        return 1 if value is None else value

    @classmethod
    def from_raw(cls, raw: Any, relation: str) -> "FilterCountQuery":
        """
        Build from the `count` entry of a has-constraint.

        Accepts a mapping with optional `value`/`operator` keys, a bare
        number (shorthand for `{"value": n}`), or nothing at all.
        """
        if raw is None or raw == "" or raw == {}:
            return cls()

        payload = raw if isinstance(raw, Mapping) else {"value": raw}

        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidParameterError(
                f"has[{relation}][count]", raw, "an invalid count"
            ) from exc
