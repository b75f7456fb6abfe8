"""Slow query logging for the realty API database engine."""

import logging
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import Pool

logger = logging.getLogger(__name__)

_MAX_LOGGED_STATEMENT = 500


def setup_query_monitoring(
    engine: AsyncEngine,
    slow_query_threshold: float = 0.1,
    log_pool_stats: bool = True,
) -> None:
    """Log a warning for every statement slower than ``slow_query_threshold``.

    Args:
        engine: Async engine whose ``sync_engine`` receives the listeners
        slow_query_threshold: Threshold in seconds (default: 0.1s)
        log_pool_stats: Also log pool checkouts at DEBUG level
    """
    if not hasattr(engine, "sync_engine"):
        logger.warning("Engine does not have sync_engine attribute, skipping query monitoring")
        return

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def receive_before_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def receive_after_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        total = time.time() - conn.info["query_start_time"].pop()
        if total <= slow_query_threshold:
            return

        truncated = statement[:_MAX_LOGGED_STATEMENT]
        if len(statement) > _MAX_LOGGED_STATEMENT:
            truncated += "..."
        logger.warning(
            f"Slow query detected ({total:.3f}s): {truncated}",
            extra={
                "duration_seconds": total,
                "threshold_seconds": slow_query_threshold,
            },
        )

    if log_pool_stats:

        @event.listens_for(Pool, "checkout")
        def receive_checkout(dbapi_conn: Any, connection_record: Any, connection_proxy: Any) -> None:
            pool = connection_proxy._pool
            logger.debug(
                f"Connection checked out from pool. "
                f"Pool size: {pool.size()}, Checked out: {pool.checkedout()}"
            )

    logger.info(
        f"Query performance monitoring enabled (slow query threshold: {slow_query_threshold}s)"
    )
