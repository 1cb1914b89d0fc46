"""Headline numbers for the individual and overview dashboards."""

import asyncio
from typing import Any, Dict, List, Optional

from ..config import AVAILABLE_YEARS, FETCH_TIMEOUT_SECONDS
from ..logging import get_logger
from ..models.schemas import (
    CandidateStats,
    ElectionMetrics,
    ElectionOverview,
    FilterOptions,
    Municipality,
    Office,
    OfficeShare,
    PartyVotes,
    TopCity,
)
from .aggregator import rank_party_votes
from .cache import ReferenceCache, cache_key
from .database import ElectionDataSource
from .orchestrator import with_timeout


logger = get_logger(__name__)

TOP_PARTIES = 10

# State-level offices contested in every general election year
DEFAULT_OFFICES = [
    Office(code=6, label="DEPUTADO ESTADUAL"),
    Office(code=7, label="DEPUTADO FEDERAL"),
    Office(code=5, label="SENADOR"),
    Office(code=3, label="GOVERNADOR"),
]

MUNICIPALITIES = [
    Municipality(code=1120, name="ACRELÂNDIA"),
    Municipality(code=1570, name="ASSIS BRASIL"),
    Municipality(code=1058, name="BRASILÉIA"),
    Municipality(code=1007, name="BUJARI"),
    Municipality(code=1015, name="CAPIXABA"),
    Municipality(code=1074, name="CRUZEIRO DO SUL"),
    Municipality(code=1112, name="EPITACIOLÂNDIA"),
    Municipality(code=1139, name="FEIJÓ"),
    Municipality(code=1104, name="JORDÃO"),
    Municipality(code=1090, name="MÂNCIO LIMA"),
    Municipality(code=1554, name="MANOEL URBANO"),
    Municipality(code=1040, name="MARECHAL THAUMATURGO"),
    Municipality(code=1511, name="PLÁCIDO DE CASTRO"),
    Municipality(code=1023, name="PORTO ACRE"),
    Municipality(code=1066, name="PORTO WALTER"),
    Municipality(code=1392, name="RIO BRANCO"),
    Municipality(code=1082, name="RODRIGUES ALVES"),
    Municipality(code=1031, name="SANTA ROSA DO PURUS"),
    Municipality(code=1457, name="SENA MADUREIRA"),
    Municipality(code=1538, name="SENADOR GUIOMARD"),
    Municipality(code=1473, name="TARAUACÁ"),
    Municipality(code=1490, name="XAPURI"),
]


def _first_value(rows: List[Dict[str, Any]], field: str, default: Any) -> Any:
    if not rows:
        return default
    value = rows[0].get(field)
    return default if value is None else value


async def get_candidate_stats(
    data_source: ElectionDataSource,
    candidate_id: int,
    year: int,
    municipality_code: Optional[int] = None,
    office_code: Optional[int] = None,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> CandidateStats:
    """Total votes, strongest city, vote share and declared expenses.

    The four procedures are independent and run concurrently; any failure
    propagates as ``DataSourceError``.
    """
    votes, city, percentage, expenses = await asyncio.gather(
        with_timeout(data_source.get_candidate_total_votes(candidate_id, year, municipality_code), timeout),
        with_timeout(data_source.get_candidate_top_city(candidate_id, year), timeout),
        with_timeout(data_source.get_candidate_vote_percentage(candidate_id, year, office_code), timeout),
        with_timeout(data_source.get_candidate_total_expenses(candidate_id, year), timeout),
    )

    return CandidateStats(
        candidate_id=candidate_id,
        year=year,
        total_votes=int(_first_value(votes, "total_votos", 0)),
        top_city=TopCity(
            name=_first_value(city, "nm_municipio", ""),
            votes=int(_first_value(city, "total_votos", 0)),
        ),
        vote_percentage=float(_first_value(percentage, "percentage", 0.0)),
        total_expenses=float(_first_value(expenses, "total_expenses", 0.0)),
    )


async def _load_metrics(data_source: ElectionDataSource, timeout: float) -> ElectionMetrics:
    raw = await with_timeout(data_source.get_election_metrics(), timeout)
    return ElectionMetrics(
        total_votes=int(_first_value(raw.get("total_votes", []), "sum", 0)),
        top_municipality=_first_value(raw.get("top_municipio", []), "nm_municipio", None),
        percent_by_office=[
            OfficeShare(office_label=row["ds_cargo"], percentage=float(row.get("percentual") or 0))
            for row in raw.get("percent_by_cargo", [])
            if row.get("ds_cargo")
        ],
        total_expenses=float(_first_value(raw.get("total_expenses", []), "sum", 0.0)),
    )


async def get_election_overview(
    data_source: ElectionDataSource,
    cache: ReferenceCache,
    year: int,
    office_code: Optional[int] = None,
    municipality_code: Optional[int] = None,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> ElectionOverview:
    """Election-wide metrics plus the top parties for the selected filters."""

    async def load_party_votes() -> List[PartyVotes]:
        rows = await with_timeout(data_source.get_party_vote_rows(year, office_code, municipality_code), timeout)
        return rank_party_votes(rows, TOP_PARTIES)

    metrics = await cache.get_or_load("metrics", lambda: _load_metrics(data_source, timeout))
    party_votes = await cache.get_or_load(
        cache_key("party_votes", year, office_code, municipality_code),
        load_party_votes,
    )
    return ElectionOverview(metrics=metrics, party_votes=party_votes)


async def get_filter_options(
    data_source: ElectionDataSource,
    cache: ReferenceCache,
    year: int,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> FilterOptions:
    """Years, offices contested in ``year`` and municipalities."""

    async def load_offices() -> List[Office]:
        rows = await with_timeout(data_source.get_offices(year), timeout)
        offices = [
            Office(code=int(row["cd_cargo"]), label=row["ds_cargo"])
            for row in rows
            if row.get("cd_cargo") is not None and row.get("ds_cargo")
        ]
        if not offices and year in AVAILABLE_YEARS:
            logger.info("offices_fallback", year=year)
            offices = list(DEFAULT_OFFICES)
        return offices

    offices = await cache.get_or_load(cache_key("offices", year), load_offices)
    return FilterOptions(years=list(AVAILABLE_YEARS), offices=offices, municipalities=list(MUNICIPALITIES))
