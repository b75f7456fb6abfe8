from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from realty.db.repositories import SearchHistoryRepository
from realty.schemas.auth import SessionRecord
from realty.schemas.base import SuccessResponse
from realty.schemas.inquiry import SearchHistoryCreate, SearchHistoryOut, SearchHistoryResponse
from realty.services.dependencies import get_search_history_repository, require_user

router = APIRouter()


@router.get("", response_model=SearchHistoryResponse)
async def list_search_history(
    limit: int = Query(10, ge=1, le=100),
    user: SessionRecord = Depends(require_user),
    repository: SearchHistoryRepository = Depends(get_search_history_repository),
) -> SearchHistoryResponse:
    rows = await repository.list_for_user(user.id, limit)
    return SearchHistoryResponse(history=[SearchHistoryOut.model_validate(row) for row in rows])


@router.post("", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
async def save_search(
    payload: SearchHistoryCreate,
    user: SessionRecord = Depends(require_user),
    repository: SearchHistoryRepository = Depends(get_search_history_repository),
) -> SuccessResponse:
    await repository.save(
        user_id=user.id,
        search_query=payload.search_query,
        filters=payload.filters,
        results_count=payload.results_count,
    )
    return SuccessResponse()
