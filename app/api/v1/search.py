# app/api/v1/search.py
from fastapi import APIRouter, Depends

from app.api.deps import get_search_service
from app.api.v1.auth import get_current_user_id
from app.models.search import SearchRequest, SearchResponse
from app.services.search import SearchService

router = APIRouter()

@router.post("/search", response_model=SearchResponse, response_model_by_alias=True)
async def search(
    payload: SearchRequest,
    _user_id: str = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service),
):
    """
    Forward a recruiter's natural-language query to the AI server and return
    the ranked candidates with their portfolio summaries.
    """
    return await service.search(payload.query)
