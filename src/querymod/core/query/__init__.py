"""Query building blocks: operators, filter expressions and builders."""

from querymod.core.query.builder import QueryBuilder, SqlAlchemyBuilder
from querymod.core.query.expressions import FilterCountQuery, FilterQuery

__all__ = ["QueryBuilder", "SqlAlchemyBuilder", "FilterQuery", "FilterCountQuery"]
