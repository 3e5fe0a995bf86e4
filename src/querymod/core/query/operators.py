# src/querymod/core/query/operators.py
from typing import Any

from ..errors import InvalidOperatorError

# Maps operator tokens from request parameters to SQLAlchemy column methods.
# For example, `?age={"operator":">=","value":18}` calls `Column.__ge__(18)`.
OPERATOR_MAP = {
    '=': '__eq__',              # Equal
    '!=': '__ne__',             # Not Equal
    '<>': '__ne__',             # Not Equal (SQL spelling)
    '<': '__lt__',              # Less Than
    '<=': '__le__',             # Less Than or Equal
    '>': '__gt__',              # Greater Than
    '>=': '__ge__',             # Greater Than or Equal
    'like': 'like',             # String LIKE
    'not like': 'not_like',     # String NOT LIKE
    'ilike': 'ilike',           # String ILIKE (case-insensitive)
    'not ilike': 'not_ilike',   # String NOT ILIKE
}

# Set-membership tokens. They never produce a comparison clause.
INCLUDE = 'include'
EXCLUDE = 'exclude'
SET_OPERATORS = {INCLUDE: 'in_', EXCLUDE: 'not_in'}

# Operators allowed when comparing a relation count.
COUNT_OPERATORS = {'=', '!=', '<>', '<', '<=', '>', '>='}

ALIASES = {'==': '='}


def normalize_operator(token: Any) -> str:
    """
    Canonicalize an operator token, raising for anything unsupported.

    Tokens are trimmed, lower-cased and have inner whitespace collapsed,
    so `"NOT  LIKE"` becomes `"not like"`. `==` becomes `=`.
    """
    if not isinstance(token, str):
        raise InvalidOperatorError(token)

    operator = " ".join(token.strip().lower().split())
    operator = ALIASES.get(operator, operator)

    if operator not in OPERATOR_MAP and operator not in SET_OPERATORS:
        raise InvalidOperatorError(token)

    return operator


def normalize_count_operator(token: Any) -> str:
    operator = normalize_operator(token)
    if operator not in COUNT_OPERATORS:
        raise InvalidOperatorError(token)
    return operator


def compare(expression: Any, operator: str, value: Any) -> Any:
    """Build `expression <operator> value` as a SQLAlchemy clause."""
    method = OPERATOR_MAP.get(operator)
    if method is None:
        raise InvalidOperatorError(operator)
    return getattr(expression, method)(value)
