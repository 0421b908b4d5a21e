"""
Backend adapters implementing :class:`~cqrs_ddd_query_translator.ports.IQueryBackend`.

The SQLAlchemy and Mongo adapters live in their own modules so their
drivers stay optional extras::

    from cqrs_ddd_query_translator.backends.sqla import SQLAlchemyQueryBackend
    from cqrs_ddd_query_translator.backends.mongo import MongoQueryBackend
"""

from __future__ import annotations

from .memory import MemoryQueryBackend

__all__ = ["MemoryQueryBackend"]
