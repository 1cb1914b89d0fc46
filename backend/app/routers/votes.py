"""Vote breakdown endpoints (municipalities, cities with coordinates, neighborhoods)."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..config import FETCH_TIMEOUT_SECONDS
from ..dependencies import get_data_source
from ..models.schemas import CityPointsResponse, VoteRowsResponse
from ..services.database import ElectionDataSource
from ..services.normalizer import MUNICIPALITY_SHAPE, NEIGHBORHOOD_SHAPE, normalize_city_points
from ..services.orchestrator import fetch_and_normalize, require_int, with_timeout


router = APIRouter(prefix="/api/votes", tags=["votes"])


@router.get("/municipalities", response_model=VoteRowsResponse)
async def votes_by_municipality(
    candidateId: Optional[str] = Query(None, description="Candidate (sq_candidato)"),
    year: Optional[str] = Query(None, description="Election year"),
    data_source: ElectionDataSource = Depends(get_data_source),
):
    """Votes and vote share per municipality for one candidate."""
    candidate_id = require_int(candidateId, "candidateId")
    election_year = require_int(year, "year")

    rows = await fetch_and_normalize(
        lambda: data_source.get_votes_by_municipality(candidate_id, election_year),
        MUNICIPALITY_SHAPE,
    )
    return VoteRowsResponse(data=rows)


@router.get("/neighborhoods", response_model=VoteRowsResponse)
async def votes_by_neighborhood(
    candidateId: Optional[str] = Query(None, description="Candidate (sq_candidato)"),
    year: Optional[str] = Query(None, description="Election year"),
    municipioId: Optional[int] = Query(None, description="Restrict to one municipality (cd_municipio)"),
    data_source: ElectionDataSource = Depends(get_data_source),
):
    """Votes per neighborhood, optionally within one municipality."""
    candidate_id = require_int(candidateId, "candidateId")
    election_year = require_int(year, "year")

    rows = await fetch_and_normalize(
        lambda: data_source.get_votes_by_neighborhood(candidate_id, election_year, municipioId),
        NEIGHBORHOOD_SHAPE,
    )
    return VoteRowsResponse(data=rows)


@router.get("/cities", response_model=CityPointsResponse)
async def votes_by_city(
    candidateId: Optional[str] = Query(None, description="Candidate (sq_candidato)"),
    year: Optional[str] = Query(None, description="Election year"),
    data_source: ElectionDataSource = Depends(get_data_source),
):
    """Votes per city for map markers; cities without coordinates are left out."""
    candidate_id = require_int(candidateId, "candidateId")
    election_year = require_int(year, "year")

    rows = await with_timeout(data_source.get_votes_by_city(candidate_id, election_year), FETCH_TIMEOUT_SECONDS)
    return CityPointsResponse(data=normalize_city_points(rows or []))
