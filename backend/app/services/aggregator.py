"""Merge two candidates' municipality votes into one comparison."""

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..models.schemas import (
    ComparisonResult,
    MunicipalityComparison,
    MunicipalityVoteRow,
    PartyVotes,
)


def percentage_diff(total_a: int, total_b: int) -> float:
    """Return (A - B) / (A + B) * 100, or 0.0 when neither side has votes."""
    total = total_a + total_b
    if total == 0:
        return 0.0
    return (total_a - total_b) / total * 100


def merge(
    rows_a: Sequence[MunicipalityVoteRow],
    rows_b: Sequence[MunicipalityVoteRow],
) -> ComparisonResult:
    """Build the comparison of candidate A's and candidate B's votes.

    Every municipality present on either side appears exactly once; the side
    without votes there gets 0. Repeated names within one side are summed so
    the per-municipality columns always add up to the side totals.
    """
    merged: Dict[str, Dict[str, Any]] = {}

    for row in rows_a:
        entry = merged.setdefault(row.municipality_name, {
            "municipality_name": row.municipality_name,
            "votes_candidate_a": 0,
            "votes_candidate_b": 0,
        })
        entry["votes_candidate_a"] += row.total_votes

    for row in rows_b:
        entry = merged.setdefault(row.municipality_name, {
            "municipality_name": row.municipality_name,
            "votes_candidate_a": 0,
            "votes_candidate_b": 0,
        })
        entry["votes_candidate_b"] += row.total_votes

    total_a = sum(r.total_votes for r in rows_a)
    total_b = sum(r.total_votes for r in rows_b)

    return ComparisonResult(
        per_municipality=[MunicipalityComparison(**entry) for entry in merged.values()],
        total_votes_a=total_a,
        total_votes_b=total_b,
        voting_percentage_diff=percentage_diff(total_a, total_b),
    )


def top_municipalities(result: ComparisonResult, n: int = 5) -> List[MunicipalityComparison]:
    """Municipalities with the most combined votes, for the bar chart."""
    if n <= 0:
        return []
    ranked = sorted(
        result.per_municipality,
        key=lambda m: (-(m.votes_candidate_a + m.votes_candidate_b), m.municipality_name),
    )
    return ranked[:n]


def rank_party_votes(rows: Iterable[Mapping[str, Any]], limit: int = 10) -> List[PartyVotes]:
    """Sum per-candidate vote rows by party and keep the top ``limit`` parties.

    Rows are ``{"sg_partido": ..., "qt_votos": ...}`` records; rows without a
    party are skipped.
    """
    totals: Dict[str, int] = {}
    for row in rows:
        party = row.get("sg_partido")
        if not party:
            continue
        totals[party] = totals.get(party, 0) + int(row.get("qt_votos") or 0)

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [PartyVotes(party=party, votes=votes) for party, votes in ranked[:limit]]
