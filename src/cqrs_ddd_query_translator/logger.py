"""
QueryLogger: forwards backend query logs to stdlib logging.

Backends report through ``log`` / ``warn`` / ``error``
``(namespace, message, context)``. A call is emitted only when the
namespace is enabled: ``debug_mode=True`` enables every namespace, a
collection of names enables just those. Context values become record
attributes so structured handlers can pick them up::

    query_logger = QueryLogger(debug_mode=["query"])
    query_logger.log_query(LogContext(query="SELECT 1", took=3.2))
    # INFO cqrs_ddd.query.query "Exec query took 3.2 ms"
    #      record.__dict__["db.statement"] == "SELECT 1"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any

SQL_ATTRIBUTE_NAME = "db.statement"
PARAMS_ATTRIBUTE_NAME = "db.params"
CONNECTION_TYPE_ATTRIBUTE_NAME = "db.connection.type"
CONNECTION_NAME_ATTRIBUTE_NAME = "db.connection.name"
TOOK_ATTRIBUTE_NAME = "db.took"

_log = logging.getLogger("cqrs_ddd.query")

_SPACES_RE = re.compile(r" +")


@dataclass(frozen=True)
class LogContext:
    """What a backend knows about the call being logged."""

    query: str | None = None
    params: Sequence[Any] | None = None
    connection_type: str | None = None
    connection_name: str | None = None
    took: float | None = None
    level: str | None = None


class QueryLogger:
    """Namespace-filtered adapter from backend log calls to stdlib records."""

    def __init__(
        self,
        debug_mode: bool | Iterable[str] = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or _log
        self.set_debug_mode(debug_mode)

    @property
    def debug_mode(self) -> bool | frozenset[str]:
        return self._debug_mode

    def set_debug_mode(self, debug_mode: bool | Iterable[str]) -> None:
        if isinstance(debug_mode, bool):
            self._debug_mode: bool | frozenset[str] = debug_mode
        else:
            self._debug_mode = frozenset(debug_mode)

    def is_enabled(self, namespace: str) -> bool:
        if isinstance(self._debug_mode, bool):
            return self._debug_mode
        return namespace in self._debug_mode

    def log(
        self, namespace: str, message: str, context: LogContext | None = None
    ) -> None:
        if not self.is_enabled(namespace):
            return

        context = context or LogContext()
        msg = _SPACES_RE.sub(" ", message.replace("\n", "")).strip()

        if context.level == "error":
            level = logging.ERROR
        elif context.level == "warning":
            level = logging.WARNING
        else:
            level = logging.INFO

        self._logger.getChild(namespace).log(
            level, msg, extra=self._attributes(context)
        )

    def error(
        self, namespace: str, message: str, context: LogContext | None = None
    ) -> None:
        self.log(namespace, message, replace(context or LogContext(), level="error"))

    def warn(
        self, namespace: str, message: str, context: LogContext | None = None
    ) -> None:
        self.log(namespace, message, replace(context or LogContext(), level="warning"))

    def log_query(self, context: LogContext) -> None:
        message = f"Exec query took {context.took} ms" if context.took else "Exec query"
        self.log("query", message, context)

    @staticmethod
    def _attributes(context: LogContext) -> dict[str, Any]:
        attributes: dict[str, Any] = {}
        if context.query:
            attributes[SQL_ATTRIBUTE_NAME] = context.query
        if context.params:
            attributes[PARAMS_ATTRIBUTE_NAME] = list(context.params)
        if context.connection_type:
            attributes[CONNECTION_TYPE_ATTRIBUTE_NAME] = context.connection_type
        if context.connection_name:
            attributes[CONNECTION_NAME_ATTRIBUTE_NAME] = context.connection_name
        if context.took:
            attributes[TOOK_ATTRIBUTE_NAME] = context.took
        return attributes
