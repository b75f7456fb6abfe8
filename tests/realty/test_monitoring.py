from __future__ import annotations

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from realty.monitoring import setup_query_monitoring


@pytest.mark.asyncio
async def test_slow_queries_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    pytest.importorskip("aiosqlite")
    engine = create_async_engine("sqlite+aiosqlite://")
    setup_query_monitoring(engine, slow_query_threshold=-1.0, log_pool_stats=False)

    try:
        with caplog.at_level(logging.WARNING, logger="realty.monitoring"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert "Slow query detected" in caplog.text
    assert "SELECT 1" in caplog.text


@pytest.mark.asyncio
async def test_fast_queries_are_not_logged(caplog: pytest.LogCaptureFixture) -> None:
    pytest.importorskip("aiosqlite")
    engine = create_async_engine("sqlite+aiosqlite://")
    setup_query_monitoring(engine, slow_query_threshold=60.0, log_pool_stats=False)

    try:
        with caplog.at_level(logging.WARNING, logger="realty.monitoring"):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    finally:
        await engine.dispose()

    assert "Slow query detected" not in caplog.text
