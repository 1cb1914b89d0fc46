"""Candidate search for the search-as-you-type box."""

import asyncio
from typing import List, Optional

from ..config import FETCH_TIMEOUT_SECONDS, SEARCH_RESULT_LIMIT
from ..exceptions import DataSourceError
from ..logging import get_logger
from ..models.schemas import CandidateIdentity
from .database import ElectionDataSource
from .normalizer import to_candidate_identity


logger = get_logger(__name__)

MIN_TERM_LENGTH = 3
MAX_LIMIT = 50


class CandidateLookup:
    """Fuzzy candidate search that never raises.

    Backend failures degrade to an empty result: an error in the search box
    is worse than an empty dropdown.
    """

    def __init__(self, data_source: ElectionDataSource, timeout: float = FETCH_TIMEOUT_SECONDS):
        self._data_source = data_source
        self._timeout = timeout

    async def search(
        self,
        term: str,
        year: int,
        limit: int = SEARCH_RESULT_LIMIT,
        office_code: Optional[int] = None,
    ) -> List[CandidateIdentity]:
        term = (term or "").strip()
        if len(term) < MIN_TERM_LENGTH:
            return []

        limit = min(max(limit, 1), MAX_LIMIT)

        try:
            rows = await asyncio.wait_for(
                self._data_source.lookup_candidates(term, year, limit, office_code),
                timeout=self._timeout,
            )
        except (DataSourceError, asyncio.TimeoutError, TimeoutError) as e:
            logger.warning("candidate_search_failed", term=term, year=year, error=str(e) or type(e).__name__)
            return []

        candidates = []
        for row in rows:
            try:
                candidates.append(to_candidate_identity(row))
            except (KeyError, TypeError, ValueError):
                logger.warning("candidate_row_skipped", row=dict(row))
        return candidates[:limit]
