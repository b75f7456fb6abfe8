"""Read-only analytics backed by the key-value store."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from realty.schemas.analytics import MetricsResponse, PopularSearchesResponse
from realty.services.analytics_service import AnalyticsTracker
from realty.services.dependencies import get_analytics

router = APIRouter()


@router.get("/popular-searches", response_model=PopularSearchesResponse)
async def popular_searches(
    limit: int = Query(10, ge=1, le=100),
    analytics: AnalyticsTracker = Depends(get_analytics),
) -> PopularSearchesResponse:
    return PopularSearchesResponse(searches=await analytics.get_popular_searches(limit))


@router.get("/metrics", response_model=MetricsResponse)
async def metrics(
    metric: str = Query("property_views", min_length=1, max_length=64),
    days: int = Query(7, ge=1, le=90),
    analytics: AnalyticsTracker = Depends(get_analytics),
) -> MetricsResponse:
    """Daily counter values, oldest first."""

    return MetricsResponse(
        metric=metric, days=days, values=await analytics.get_metrics(metric, days)
    )
