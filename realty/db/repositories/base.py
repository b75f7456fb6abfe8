"""Shared helpers for repository implementations."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    def _dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    async def insert_ignoring_conflicts(
        self, table: Table, rows: list[dict[str, Any]], *, conflict_columns: list[str]
    ) -> None:
        """Insert ``rows`` and silently skip any that violate ``conflict_columns``.

        Both supported dialects expose ``ON CONFLICT DO NOTHING``; the unique
        constraint on the target columns is what makes repeats a no-op.
        """

        if not rows:
            return

        if self._dialect_name() == "postgresql":
            statement = postgresql.insert(table)
        else:
            statement = sqlite.insert(table)
        statement = statement.values(rows).on_conflict_do_nothing(
            index_elements=conflict_columns
        )
        await self._session.execute(statement)
