"""Overview dashboard, filter options and reference-cache endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..config import DEFAULT_ELECTION_YEAR
from ..dependencies import get_data_source, get_reference_cache
from ..models.schemas import ElectionOverview, FilterOptions
from ..services.cache import ReferenceCache
from ..services.dashboard import get_election_overview, get_filter_options
from ..services.database import ElectionDataSource


router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/filters", response_model=FilterOptions)
async def get_filters(
    year: int = Query(DEFAULT_ELECTION_YEAR, description="Election year"),
    data_source: ElectionDataSource = Depends(get_data_source),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    """Get available filter options."""
    return await get_filter_options(data_source, cache, year)


@router.get("/overview", response_model=ElectionOverview)
async def get_overview(
    year: int = Query(DEFAULT_ELECTION_YEAR, description="Election year"),
    office: Optional[int] = Query(None, description="Office code (cd_cargo)"),
    municipality: Optional[int] = Query(None, description="Municipality code (cd_municipio)"),
    data_source: ElectionDataSource = Depends(get_data_source),
    cache: ReferenceCache = Depends(get_reference_cache),
):
    """Election totals and the ten parties with the most votes for the filters."""
    return await get_election_overview(
        data_source,
        cache,
        year,
        office_code=office,
        municipality_code=municipality,
    )


@router.post("/cache/invalidate")
async def invalidate_cache(cache: ReferenceCache = Depends(get_reference_cache)):
    """Drop cached offices, metrics and party rankings."""
    cache.invalidate()
    return {"status": "invalidated"}
