"""Query API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from semantic_recall.api.dependencies import get_current_user, get_query_service
from semantic_recall.models.dto import QueryRequest, QueryResponse
from semantic_recall.retrieval.search import QueryService

router = APIRouter()


@router.post("/query", response_model=QueryResponse, summary="Search saved content by meaning")
def run_query(
    request: QueryRequest,
    user_id: str = Depends(get_current_user),
    service: QueryService = Depends(get_query_service),
) -> QueryResponse:
    outcome = service.query(
        request.query,
        top_k=request.k,
        synthesize_answer=request.synthesize_answer,
        owner_id=user_id,
    )
    return QueryResponse(**outcome.to_dict())


__all__ = ["router"]
