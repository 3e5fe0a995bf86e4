"""
querymod-py: Turn untrusted query-string parameters into safe SQLAlchemy queries.
"""

from querymod.core.config import FilterType, QueryConfig, SearchMode
from querymod.core.errors import (
    InvalidFieldError,
    InvalidOperatorError,
    InvalidParameterError,
    InvalidRelationError,
    MalformedFilterError,
    NoDataError,
    QueryModifierError,
    SearchNotSupportedError,
    UnknownModifierError,
)
from querymod.core.introspection import SqlAlchemyIntrospector
from querymod.core.query import FilterCountQuery, FilterQuery, QueryBuilder, SqlAlchemyBuilder
from querymod.modifiers import BaseModifier
from querymod.pipeline import apply, build_statement

__version__ = "0.1.0"

__all__ = [
    "apply",
    "build_statement",
    "QueryConfig",
    "FilterType",
    "SearchMode",
    "QueryBuilder",
    "SqlAlchemyBuilder",
    "SqlAlchemyIntrospector",
    "FilterQuery",
    "FilterCountQuery",
    "BaseModifier",
    "QueryModifierError",
    "NoDataError",
    "InvalidFieldError",
    "InvalidRelationError",
    "MalformedFilterError",
    "SearchNotSupportedError",
    "InvalidParameterError",
    "InvalidOperatorError",
    "UnknownModifierError",
]
