"""Tests for QueryLogger."""

from __future__ import annotations

import logging

import pytest

from cqrs_ddd_query_translator.logger import (
    CONNECTION_NAME_ATTRIBUTE_NAME,
    CONNECTION_TYPE_ATTRIBUTE_NAME,
    PARAMS_ATTRIBUTE_NAME,
    SQL_ATTRIBUTE_NAME,
    TOOK_ATTRIBUTE_NAME,
    LogContext,
    QueryLogger,
)


@pytest.fixture
def capture(caplog):
    caplog.set_level(logging.DEBUG, logger="cqrs_ddd.query")
    return caplog


def _records(caplog, name="cqrs_ddd.query.query"):
    return [r for r in caplog.records if r.name == name]


# -- Debug mode --------------------------------------------------------------


def test_disabled_by_default(capture):
    query_logger = QueryLogger()
    query_logger.log("query", "SELECT 1")
    assert query_logger.debug_mode is False
    assert _records(capture) == []


def test_true_enables_every_namespace(capture):
    query_logger = QueryLogger(debug_mode=True)
    query_logger.log("discovery", "found 3 entities")
    assert [r.getMessage() for r in _records(capture, "cqrs_ddd.query.discovery")] == [
        "found 3 entities"
    ]


def test_namespace_list_filters(capture):
    query_logger = QueryLogger(debug_mode=["query"])
    query_logger.log("query", "kept")
    query_logger.log("info", "dropped")
    assert query_logger.is_enabled("query") is True
    assert query_logger.is_enabled("info") is False
    assert [r.getMessage() for r in capture.records] == ["kept"]


def test_set_debug_mode(capture):
    query_logger = QueryLogger()
    query_logger.set_debug_mode(("query", "schema"))
    assert query_logger.debug_mode == frozenset({"query", "schema"})
    query_logger.log("schema", "created table")
    assert len(_records(capture, "cqrs_ddd.query.schema")) == 1


# -- Formatting --------------------------------------------------------------


def test_message_is_collapsed_to_one_line(capture):
    QueryLogger(debug_mode=True).log("query", "select *\n  from   authors\n")
    assert _records(capture)[0].getMessage() == "select * from authors"


@pytest.mark.parametrize(
    ("method", "level"),
    [("log", logging.INFO), ("warn", logging.WARNING), ("error", logging.ERROR)],
)
def test_levels(capture, method, level):
    getattr(QueryLogger(debug_mode=True), method)("query", "message")
    assert _records(capture)[0].levelno == level


def test_context_level_is_respected(capture):
    QueryLogger(debug_mode=True).log("query", "boom", LogContext(level="error"))
    assert _records(capture)[0].levelno == logging.ERROR


def test_context_becomes_record_attributes(capture):
    context = LogContext(
        query="select 1 where a = ?",
        params=[5],
        connection_type="postgresql",
        connection_name="replica",
        took=4.5,
    )
    QueryLogger(debug_mode=True).log_query(context)

    record = _records(capture)[0]
    assert record.getMessage() == "Exec query took 4.5 ms"
    assert record.__dict__[SQL_ATTRIBUTE_NAME] == "select 1 where a = ?"
    assert record.__dict__[PARAMS_ATTRIBUTE_NAME] == [5]
    assert record.__dict__[CONNECTION_TYPE_ATTRIBUTE_NAME] == "postgresql"
    assert record.__dict__[CONNECTION_NAME_ATTRIBUTE_NAME] == "replica"
    assert record.__dict__[TOOK_ATTRIBUTE_NAME] == 4.5


def test_unset_context_values_are_omitted(capture):
    QueryLogger(debug_mode=True).log_query(LogContext(query="select 1"))
    record = _records(capture)[0]
    assert record.getMessage() == "Exec query"
    assert SQL_ATTRIBUTE_NAME in record.__dict__
    assert PARAMS_ATTRIBUTE_NAME not in record.__dict__
    assert TOOK_ATTRIBUTE_NAME not in record.__dict__


def test_custom_logger(caplog):
    target = logging.getLogger("app.db")
    with caplog.at_level(logging.INFO, logger="app.db"):
        QueryLogger(debug_mode=True, logger=target).log("query", "hello")
    assert [r.name for r in caplog.records] == ["app.db.query"]
