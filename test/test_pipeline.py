"""
Tests for running the modifier pipeline, both recorded and against SQLite.
"""

import pytest
from sqlalchemy import select

from conftest import Category, Period, RecordingBuilder
from querymod import BaseModifier, QueryConfig, apply, build_statement
from querymod.core.errors import InvalidFieldError, InvalidRelationError, SearchNotSupportedError


PARAMS = {
    "fields": "name,rank",
    "id": ["1", "2"],
    "name": '{"operator": "like", "value": "%o%"}',
    "sort": "-rank",
    "limit": "5",
    "page": "2",
    "q": "music",
    "has": "periods",
}


class MutatingModifier(BaseModifier):
    name = "mutating"

    def modify(self):
        self.data["injected"] = "1"
        return self.builder


class TestOrdering:
    def test_stages_run_in_configured_order(self, static_config):
        builder = apply(PARAMS, RecordingBuilder(), static_config)
        assert [call[0] for call in builder.calls] == [
            "select", "where_in", "where", "order_by", "limit", "offset", "search", "has",
        ]

    def test_custom_order(self, static_introspector):
        config = QueryConfig(modifiers=["has", "sort"]).populate_filterable_fields("categories", static_introspector)
        builder = apply(PARAMS, RecordingBuilder(), config)
        assert builder.calls == [("has", "periods", ">=", 1), ("order_by", "rank", "desc")]

    def test_no_modifiers(self, static_introspector):
        config = QueryConfig(modifiers=[]).populate_filterable_fields("categories", static_introspector)
        assert apply(PARAMS, RecordingBuilder(), config).calls == []

    def test_empty_whitelist_filters_nothing(self):
        builder = apply({"sort": "", "name": "x"}, RecordingBuilder(), QueryConfig(modifiers=["filter"]))
        assert builder.calls == []

    def test_deterministic(self, static_config):
        first = apply(PARAMS, RecordingBuilder(), static_config)
        second = apply(PARAMS, RecordingBuilder(), static_config)
        assert first.calls == second.calls


class TestParameters:
    def test_parameters_are_not_modified(self, static_config):
        params = {"id": ["1", "2"], "has": {"periods": {"count": "2", "name": "Late"}}}
        snapshot = {"id": ["1", "2"], "has": {"periods": {"count": "2", "name": "Late"}}}
        apply(params, RecordingBuilder(), static_config)
        assert params == snapshot

    def test_stages_cannot_write_parameters(self, static_config):
        params = {"id": "1"}
        static_config.add_modifier(MutatingModifier)
        with pytest.raises(TypeError):
            apply(params, RecordingBuilder(), static_config)
        assert params == {"id": "1"}


class TestErrors:
    def test_first_error_aborts_the_run(self, static_config):
        builder = RecordingBuilder()
        with pytest.raises(InvalidFieldError):
            apply({"id": "1", "sort": "password", "limit": "5"}, builder, static_config)
        assert builder.calls == [("where", "id", "=", "1")]

    def test_unsupported_search(self, static_config):
        with pytest.raises(SearchNotSupportedError):
            apply({"q": "x"}, RecordingBuilder(searchable=False), static_config)


class TestBuildStatement:
    def run(self, session, params, model=Category, config=None, statement=None, introspector=None):
        statement = build_statement(params, model, introspector, config, statement)
        return session.scalars(statement).all()

    def test_filter_and_sort(self, session, introspector):
        rows = self.run(
            session,
            {"rank": '{"operator": ">", "value": 1}', "sort": "-rank"},
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Baroque", "Minimal"]

    def test_paging(self, session, introspector):
        rows = self.run(session, {"sort": "id", "limit": "2", "page": "2"}, introspector=introspector)
        assert [row.name for row in rows] == ["Minimal"]

    def test_or_filter_type(self, session, introspector):
        rows = self.run(
            session,
            {"name": "Baroque", "rank": "1", "sort": "id"},
            config=QueryConfig(filter_type="or"),
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Baroque", "Romantic"]

    def test_or_filter_with_search(self, session, introspector):
        rows = self.run(
            session,
            {"id": "1", "name": "Romantic", "q": "expressive"},
            config=QueryConfig(filter_type="or"),
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Romantic"]

    def test_or_filter_with_has(self, session, introspector):
        rows = self.run(
            session,
            {"id": "3", "name": "Baroque", "has": "periods"},
            config=QueryConfig(filter_type="or"),
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Baroque"]

    def test_or_filter_with_where_in(self, session, introspector):
        rows = self.run(
            session,
            {"id": ["2", "3"], "name": "Baroque", "rank": "2", "sort": "id"},
            config=QueryConfig(filter_type="or"),
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Minimal"]

    def test_has_with_sub_query(self, session, introspector):
        rows = self.run(
            session,
            {"has": {"periods": {"length": '{"operator": ">", "value": 60}'}}},
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Baroque"]

    def test_has_count(self, session, introspector):
        rows = self.run(
            session,
            {"has": {"tags": {"count": {"operator": "=", "value": "2"}}}},
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Romantic"]

    def test_search(self, session, introspector):
        rows = self.run(session, {"q": "ornate"}, introspector=introspector)
        assert [row.name for row in rows] == ["Baroque"]

    def test_base_statement_is_kept(self, session, introspector):
        rows = self.run(
            session,
            {"length": '{"operator": "<", "value": 60}'},
            model=Period,
            statement=select(Period).where(Period.category_id == 1),
            introspector=introspector,
        )
        assert [row.name for row in rows] == ["Early"]

    def test_unknown_relation(self, session, introspector):
        with pytest.raises(InvalidRelationError):
            self.run(session, {"has": "composers"}, introspector=introspector)
