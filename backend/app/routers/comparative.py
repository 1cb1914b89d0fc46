"""Candidate comparison endpoint."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_orchestrator
from ..models.schemas import ComparisonOutcome
from ..services.orchestrator import ComparisonOrchestrator


router = APIRouter(prefix="/api", tags=["comparative"])


@router.get("/comparative", response_model=ComparisonOutcome)
async def compare_candidates(
    candidate1Id: Optional[str] = Query(None, description="First candidate (sq_candidato)"),
    candidate2Id: Optional[str] = Query(None, description="Second candidate (sq_candidato)"),
    year: Optional[str] = Query(None, description="Election year"),
    orchestrator: ComparisonOrchestrator = Depends(get_orchestrator),
):
    """Compare two candidates' votes municipality by municipality.

    All three parameters are required (400 otherwise). If one candidate's
    votes cannot be fetched the comparison is still returned with that side
    listed in ``unavailable``.
    """
    return await orchestrator.compare(candidate1Id, candidate2Id, year)
