from __future__ import annotations

import logging
import time

from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import get_settings

logger = logging.getLogger("gstbook.db")

MAX_SQL_CHARS = 200


def _shorten(statement: str) -> str:
    sql = " ".join(statement.split())
    return sql if len(sql) <= MAX_SQL_CHARS else sql[: MAX_SQL_CHARS - 3] + "..."


def add_query_logger(engine: Engine, label: str, threshold_ms: int | None = None) -> None:
    """Log statements on ``engine`` that take longer than ``threshold_ms``.

    The threshold defaults to ``db_slow_query_ms`` from the settings.
    """

    limit = get_settings().db_slow_query_ms if threshold_ms is None else threshold_ms

    @event.listens_for(engine, "before_cursor_execute")
    def _started(conn, cursor, statement, parameters, context, executemany):  # type: ignore[no-untyped-def]
        context.query_started = time.perf_counter()

    @event.listens_for(engine, "after_cursor_execute")
    def _finished(conn, cursor, statement, parameters, context, executemany):  # type: ignore[no-untyped-def]
        elapsed_ms = (time.perf_counter() - context.query_started) * 1000
        if elapsed_ms > limit:
            logger.warning(
                "slow query",
                extra={"db": label, "ms": int(elapsed_ms), "sql": _shorten(statement)},
            )
