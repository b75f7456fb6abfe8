"""Analytics read models."""

from __future__ import annotations

from pydantic import Field

from realty.schemas.base import CamelModel


class PopularSearch(CamelModel):
    query: str
    count: int


class PopularSearchesResponse(CamelModel):
    searches: list[PopularSearch] = Field(default_factory=list)


class MetricPoint(CamelModel):
    date: str
    value: int


class MetricsResponse(CamelModel):
    metric: str
    days: int
    values: list[MetricPoint] = Field(default_factory=list)


class KeyValueHealth(CamelModel):
    status: str
    timestamp: str
