"""Startup warmup so the first request does not pay connection costs."""

from __future__ import annotations

import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from realty.cache import CacheLayer

logger = logging.getLogger(__name__)


async def warmup_database(engine: AsyncEngine) -> None:
    """Open a pooled connection and issue ``SELECT 1``."""
    try:
        start = time.time()
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        elapsed = (time.time() - start) * 1000
        logger.info(f"✓ Database connection warmed up ({elapsed:.0f}ms)")
    except SQLAlchemyError as e:
        logger.warning(f"Database warmup failed: {e}")


async def warmup_key_value_store(cache: CacheLayer) -> None:
    """Round-trip a probe entry; failures only degrade caching."""
    start = time.time()
    if not await cache.health_check():
        logger.info("⚠ Key-value store warmup failed (health check did not round-trip)")
        return
    elapsed = (time.time() - start) * 1000
    logger.info(f"✓ Key-value store warmed up ({elapsed:.0f}ms)")


async def warmup_all(engine: AsyncEngine, cache: CacheLayer) -> None:
    logger.info("=" * 60)
    logger.info("Warming up backend connections...")
    logger.info("=" * 60)
    start = time.time()
    await warmup_database(engine)
    await warmup_key_value_store(cache)
    elapsed = (time.time() - start) * 1000
    logger.info("=" * 60)
    logger.info(f"✓ Backend warmup complete ({elapsed:.0f}ms)")
    logger.info("=" * 60)
