"""Shared fixtures for query translator tests."""

from __future__ import annotations

from typing import Any

import pytest

from cqrs_ddd_query_translator.predicates import FieldRef, Predicate
from cqrs_ddd_query_translator.types import OrderDirection


class RecordingBackend:
    """IQueryBackend stub that records every call and returns canned rows."""

    def __init__(self, rows: list[Any] | None = None) -> None:
        self.rows = list(rows or [])
        self.orders: list[tuple[FieldRef, OrderDirection]] = []
        self.limits: list[tuple[int, int]] = []
        self.predicates: list[Predicate] = []
        self.fetch_calls = 0

    def add_order(self, field: FieldRef, direction: OrderDirection) -> None:
        self.orders.append((field, direction))

    def set_limit(self, limit: int, offset: int) -> None:
        self.limits.append((limit, offset))

    def and_where(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    async def fetch(self) -> list[Any]:
        self.fetch_calls += 1
        if not self.limits:
            return list(self.rows)
        limit, offset = self.limits[-1]
        return self.rows[offset : offset + limit]


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def people() -> list[dict[str, Any]]:
    return [
        {
            "id": "p1",
            "name": "Ada Lovelace",
            "bio": "Wrote the first program",
            "status": "active",
            "age": 36,
            "score": 10**15,
            "deleted_at": None,
            "address": {"city": "London"},
            "tags": ["math", "poetry"],
        },
        {
            "id": "p2",
            "name": "Alan Turing",
            "bio": "Broke Enigma",
            "status": "active",
            "age": 41,
            "score": 10**16,
            "deleted_at": None,
            "address": {"city": "Manchester"},
            "tags": ["math"],
        },
        {
            "id": "p3",
            "name": "Grace Hopper",
            "bio": "Found a moth",
            "status": "retired",
            "age": 85,
            "score": 7,
            "deleted_at": "1992-01-01T00:00:00",
            "address": {"city": "Arlington"},
            "tags": [],
        },
    ]


@pytest.fixture
def make_backend():
    """Factory for a RecordingBackend preloaded with rows."""
    return RecordingBackend
