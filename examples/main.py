# examples/main.py
"""
querymod-py: a queryable collection endpoint over an SQLite database.

Run with `uvicorn examples.main:app` and try for example:
    /categories?name={"operator":"like","value":"B%"}&sort=-name
    /categories?has={"periods":{"count":{"operator":">","value":1}}}
    /periods?category_id[]=1&category_id[]=2&limit=5&page=1
"""

from typing import Any, Dict, List

from fastapi import Depends, FastAPI
from sqlalchemy import ForeignKey, String, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship
from sqlalchemy.pool import StaticPool

from querymod import QueryConfig, SqlAlchemyIntrospector, build_statement
from querymod.api import query_params, register_error_handlers
from querymod.core.logging import color_palette, log


class Base(DeclarativeBase):
    pass


class Category(Base):
    __tablename__ = "categories"
    __searchable__ = ("name",)

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True)
    periods: Mapped[List["Period"]] = relationship(back_populates="category")


class Period(Base):
    __tablename__ = "periods"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(64), unique=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"))
    category: Mapped[Category] = relationship(back_populates="periods")


# ? Database -----------------------------------------------------------------------------------

engine = create_engine(
    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
Base.metadata.create_all(engine)
introspector = SqlAlchemyIntrospector(engine)

with Session(engine) as session:
    baroque = Category(name="Baroque", periods=[Period(name="Early"), Period(name="Late")])
    session.add_all([baroque, Category(name="Romantic", periods=[Period(name="High")])])
    session.commit()


def get_db():
    with Session(engine) as session:
        yield session


# ? App -----------------------------------------------------------------------------------

app = FastAPI(title="querymod example")
register_error_handlers(app)


def serialize(record: Base) -> Dict[str, Any]:
    return {c.name: getattr(record, c.name, None) for c in record.__table__.columns}


@app.get("/categories")
def list_categories(
    params: Dict[str, Any] = Depends(query_params), db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    statement = build_statement(params, Category, introspector, QueryConfig(default_limit=20))
    return [serialize(row) for row in db.scalars(statement)]


@app.get("/periods")
def list_periods(
    params: Dict[str, Any] = Depends(query_params), db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    # Only periods of existing categories; request filters are added inside this
    base = select(Period).where(Period.category_id.is_not(None))
    config = QueryConfig(default_limit=20, max_limit=100).add_modifier("with")
    statement = build_statement(params, Period, introspector, config, statement=base)
    return [serialize(row) for row in db.scalars(statement)]


log.section("Starting Application")
with log.indented():
    for table in Base.metadata.sorted_tables:
        log.success(f"Serving {color_palette['model'](table.name)}")
