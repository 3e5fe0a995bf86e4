"""
Shared pytest fixtures for querymod tests.
Provides an SQLite schema with related models and a builder that records calls.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest
from sqlalchemy import Column, ForeignKey, Integer, String, Table, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship
from sqlalchemy.pool import StaticPool

from querymod import QueryConfig, SqlAlchemyIntrospector
from querymod.core.errors import InvalidRelationError


# ============================================================================
# Schema
# ============================================================================

class Base(DeclarativeBase):
    pass


category_tags = Table(
    "category_tags",
    Base.metadata,
    Column("category_id", ForeignKey("categories.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"
    __searchable__ = ("name", "description")

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rank: Mapped[int] = mapped_column(Integer, default=0)

    periods: Mapped[List["Period"]] = relationship(back_populates="category")
    tags: Mapped[List["Tag"]] = relationship(secondary=category_tags)


class Period(Base):
    __tablename__ = "periods"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True)
    length: Mapped[int] = mapped_column(Integer, default=0)
    category_id: Mapped[Optional[int]] = mapped_column(ForeignKey("categories.id"))

    category: Mapped[Optional[Category]] = relationship(back_populates="periods")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(String(32))


# ============================================================================
# Database fixtures
# ============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Session over a small, fixed data set."""
    with Session(engine) as session:
        classic, modern = Tag(label="classic"), Tag(label="modern")
        session.add_all([
            Category(
                id=1, name="Baroque", description="Ornate music", rank=3,
                periods=[Period(name="Early", length=50), Period(name="Late", length=70)],
                tags=[classic],
            ),
            Category(
                id=2, name="Romantic", description="Expressive music", rank=1,
                periods=[Period(name="High", length=40)],
                tags=[classic, modern],
            ),
            Category(id=3, name="Minimal", description=None, rank=2),
        ])
        session.commit()
        yield session


@pytest.fixture
def introspector(engine):
    return SqlAlchemyIntrospector(engine)


@pytest.fixture
def config(introspector):
    """Config whitelisting every column of the categories table."""
    return QueryConfig().populate_filterable_fields("categories", introspector)


# ============================================================================
# Recording builder
# ============================================================================

class StaticIntrospector:
    """Column lister backed by a plain dict of table -> columns."""

    def __init__(self, tables: Dict[str, Sequence[str]]):
        self.tables = tables
        self.requested: List[str] = []

    def list_columns(self, table: str) -> List[str]:
        self.requested.append(table)
        return list(self.tables.get(table, []))


class RecordingBuilder:
    """Builder double that records every call, in order, as a tuple."""

    def __init__(
        self,
        model_name: str = "Category",
        table: str = "categories",
        relations: Optional[Dict[str, str]] = None,
        searchable: bool = True,
    ):
        self._model_name = model_name
        self._table = table
        self.relations = relations if relations is not None else {"periods": "periods", "tags": "tags"}
        self.searchable = searchable
        self.calls: List[tuple] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def table_identifier(self) -> str:
        return self._table

    def _record(self, *call: Any) -> "RecordingBuilder":
        self.calls.append(call)
        return self

    def where(self, field, operator, value):
        return self._record("where", field, operator, value)

    def or_where(self, field, operator, value):
        return self._record("or_where", field, operator, value)

    def where_in(self, field, values):
        return self._record("where_in", field, list(values))

    def where_not_in(self, field, values):
        return self._record("where_not_in", field, list(values))

    def order_by(self, field, direction="asc"):
        return self._record("order_by", field, direction)

    def limit(self, count):
        return self._record("limit", count)

    def offset(self, count):
        return self._record("offset", count)

    def select(self, fields):
        return self._record("select", list(fields))

    def with_(self, relations):
        return self._record("with", list(relations))

    def has(self, relation, operator=">=", count=1):
        return self._record("has", relation, operator, count)

    def where_has(self, relation: str, callback: Callable, operator=">=", count=1):
        related = RecordingBuilder(
            model_name=relation.title(), table=self.relations[relation], relations={}
        )
        callback(related)
        return self._record("where_has", relation, related.calls, operator, count)

    def related_table_identifier(self, relation):
        return self.relations[relation]

    def try_get_relation(self, name):
        return self.relations.get(name) if isinstance(name, str) else None

    def get_relation(self, name):
        relation = self.try_get_relation(name)
        if relation is None:
            raise InvalidRelationError(name, self._model_name)
        return relation

    def supports_search(self):
        return self.searchable

    def search(self, term, mode, scope=None):
        return self._record("search", term, mode, None if scope is None else list(scope))


CATEGORY_COLUMNS = ["id", "name", "description", "rank"]
PERIOD_COLUMNS = ["id", "name", "length", "category_id"]
TAG_COLUMNS = ["id", "label"]


@pytest.fixture
def recorder():
    return RecordingBuilder()


@pytest.fixture
def static_introspector():
    return StaticIntrospector(
        {"categories": CATEGORY_COLUMNS, "periods": PERIOD_COLUMNS, "tags": TAG_COLUMNS}
    )


@pytest.fixture
def static_config(static_introspector):
    return QueryConfig().populate_filterable_fields("categories", static_introspector)
