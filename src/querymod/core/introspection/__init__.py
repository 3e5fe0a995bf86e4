"""Schema introspection collaborators."""

from querymod.core.introspection.inspector import SqlAlchemyIntrospector, split_table_identifier

__all__ = ["SqlAlchemyIntrospector", "split_table_identifier"]
