"""Candidate comparison: fetch both candidates and merge their votes."""

import asyncio
import itertools
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

from ..config import FETCH_TIMEOUT_SECONDS
from ..exceptions import (
    DataSourceError,
    ElectionDataError,
    NotFoundError,
    StaleResponseError,
    ValidationError,
)
from ..logging import get_logger
from ..models.schemas import CandidateIdentity, ComparisonOutcome, MunicipalityVoteRow
from .aggregator import merge, top_municipalities
from .database import ElectionDataSource
from .normalizer import MUNICIPALITY_SHAPE, RawRow, RowShape, normalize, to_candidate_identity


logger = get_logger(__name__)

T = TypeVar("T")

TOP_MUNICIPALITIES = 5
SIDES = ("candidate_a", "candidate_b")


def require_int(value: Any, name: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required parameter: {name}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Parameter {name} must be an integer")


async def with_timeout(coro: Awaitable[T], timeout: float) -> T:
    """Await ``coro``; a timeout is reported as a ``DataSourceError``."""
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except (asyncio.TimeoutError, TimeoutError):
        raise DataSourceError(f"Data service did not answer within {timeout:g}s")


async def fetch_and_normalize(
    fetch: Callable[[], Awaitable[List[RawRow]]],
    shape: RowShape = MUNICIPALITY_SHAPE,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> List[MunicipalityVoteRow]:
    """Run one vote-breakdown fetch and normalize its rows."""
    rows = await with_timeout(fetch(), timeout)
    return normalize(rows or [], shape)


class ComparisonOrchestrator:
    """Entry point for comparing two candidates in one election year."""

    def __init__(self, data_source: ElectionDataSource, timeout: float = FETCH_TIMEOUT_SECONDS):
        self._data_source = data_source
        self._timeout = timeout

    async def _identity(self, candidate_id: int, year: int) -> CandidateIdentity:
        row = await with_timeout(self._data_source.get_candidate_identity(candidate_id, year), self._timeout)
        if not row:
            raise NotFoundError(f"Candidate {candidate_id} not found for {year}")
        try:
            return to_candidate_identity(row)
        except (KeyError, TypeError, ValueError):
            raise DataSourceError(f"Malformed candidate record for {candidate_id}")

    async def _votes(self, candidate_id: int, year: int) -> List[MunicipalityVoteRow]:
        return await fetch_and_normalize(
            lambda: self._data_source.get_votes_by_municipality(candidate_id, year),
            MUNICIPALITY_SHAPE,
            self._timeout,
        )

    async def compare(self, candidate_a_id: Any, candidate_b_id: Any, year: Any) -> ComparisonOutcome:
        """Compare two candidates' per-municipality votes.

        Raises:
            ValidationError: an id or the year is missing or not an integer.
            NotFoundError: either candidate does not exist for ``year``.
            DataSourceError: an identity fetch failed, or both vote fetches did.

        A single failed vote fetch is not fatal: that side is compared with
        no votes and listed in ``unavailable``.
        """
        a_id = require_int(candidate_a_id, "candidate1Id")
        b_id = require_int(candidate_b_id, "candidate2Id")
        election_year = require_int(year, "year")

        identity_a, identity_b, votes_a, votes_b = await asyncio.gather(
            self._identity(a_id, election_year),
            self._identity(b_id, election_year),
            self._votes(a_id, election_year),
            self._votes(b_id, election_year),
            return_exceptions=True,
        )

        for identity in (identity_a, identity_b):
            if isinstance(identity, BaseException):
                raise identity

        rows: List[List[MunicipalityVoteRow]] = []
        unavailable = []
        for side, candidate_id, votes in zip(SIDES, (a_id, b_id), (votes_a, votes_b)):
            if isinstance(votes, DataSourceError):
                logger.warning("candidate_votes_unavailable", side=side, candidate_id=candidate_id, year=election_year, error=str(votes))
                unavailable.append(side)
                rows.append([])
            elif isinstance(votes, BaseException):
                raise votes
            else:
                rows.append(votes)

        if len(unavailable) == len(SIDES):
            raise DataSourceError("Vote data unavailable for both candidates")

        comparison = merge(rows[0], rows[1])
        logger.info(
            "candidates_compared",
            candidate_a=a_id,
            candidate_b=b_id,
            year=election_year,
            municipalities=len(comparison.per_municipality),
            unavailable=unavailable,
        )

        return ComparisonOutcome(
            candidate_a=identity_a,
            candidate_b=identity_b,
            comparison=comparison,
            top_municipalities=top_municipalities(comparison, TOP_MUNICIPALITIES),
            unavailable=unavailable,
        )


class ComparisonSession:
    """Sequence of comparisons for one client where only the newest counts.

    Each request gets an increasing sequence number. A request that resolves
    after a newer one was issued is discarded (``compare`` returns None), so an
    old answer never replaces a newer one.
    """

    def __init__(self, orchestrator: ComparisonOrchestrator):
        self._orchestrator = orchestrator
        self._sequence = itertools.count(1)
        self._latest_issued = 0
        self.latest: Optional[ComparisonOutcome] = None

    def _ensure_current(self, ticket: int) -> None:
        if ticket != self._latest_issued:
            raise StaleResponseError(f"request {ticket} superseded by {self._latest_issued}")

    async def compare(self, candidate_a_id: Any, candidate_b_id: Any, year: Any) -> Optional[ComparisonOutcome]:
        ticket = next(self._sequence)
        self._latest_issued = ticket
        try:
            outcome = await self._orchestrator.compare(candidate_a_id, candidate_b_id, year)
        except ElectionDataError:
            # failures of superseded requests are dropped like their results
            if ticket != self._latest_issued:
                logger.debug("stale_comparison_failure_discarded", ticket=ticket)
                return None
            raise

        try:
            self._ensure_current(ticket)
        except StaleResponseError as e:
            logger.debug("stale_comparison_discarded", reason=str(e))
            return None

        self.latest = outcome
        return outcome
