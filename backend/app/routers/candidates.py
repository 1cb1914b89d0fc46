"""Candidate search and per-candidate statistics endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..config import DEFAULT_ELECTION_YEAR, SEARCH_RESULT_LIMIT
from ..dependencies import get_data_source, get_lookup
from ..models.schemas import CandidateSearchResponse, CandidateStats
from ..services.dashboard import get_candidate_stats
from ..services.database import ElectionDataSource
from ..services.lookup import CandidateLookup
from ..services.orchestrator import require_int


router = APIRouter(prefix="/api/candidates", tags=["candidates"])


@router.get("/search", response_model=CandidateSearchResponse)
async def search_candidates(
    q: str = Query("", description="Part of the candidate's ballot or full name"),
    year: int = Query(DEFAULT_ELECTION_YEAR, description="Election year"),
    office: Optional[int] = Query(None, description="Office code (cd_cargo)"),
    limit: int = Query(SEARCH_RESULT_LIMIT, description="Maximum number of candidates"),
    lookup: CandidateLookup = Depends(get_lookup),
):
    """Search candidates by name.

    Terms shorter than 3 characters and backend failures both return an
    empty list.
    """
    candidates = await lookup.search(q, year, limit=limit, office_code=office)
    return CandidateSearchResponse(data=candidates)


@router.get("/{candidate_id}/stats", response_model=CandidateStats)
async def candidate_stats(
    candidate_id: int,
    year: Optional[str] = Query(None, description="Election year"),
    municipality: Optional[int] = Query(None, description="Municipality code (cd_municipio)"),
    office: Optional[int] = Query(None, description="Office code (cd_cargo)"),
    data_source: ElectionDataSource = Depends(get_data_source),
):
    """Total votes, top city, vote share and declared expenses for a candidate."""
    return await get_candidate_stats(
        data_source,
        candidate_id,
        require_int(year, "year"),
        municipality_code=municipality,
        office_code=office,
    )
