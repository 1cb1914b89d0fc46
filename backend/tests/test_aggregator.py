import pytest

from app.models.schemas import MunicipalityVoteRow
from app.services.aggregator import merge, percentage_diff, rank_party_votes, top_municipalities


def row(name, votes, pct=0.0):
    return MunicipalityVoteRow(municipality_name=name, total_votes=votes, vote_percentage=pct)


def as_tuples(result):
    return sorted(
        (m.municipality_name, m.votes_candidate_a, m.votes_candidate_b)
        for m in result.per_municipality
    )


def test_disjoint_municipalities():
    result = merge([row("Rio Branco", 100, 50.0)], [row("Cruzeiro do Sul", 80, 40.0)])

    assert as_tuples(result) == [("Cruzeiro do Sul", 0, 80), ("Rio Branco", 100, 0)]
    assert result.total_votes_a == 100
    assert result.total_votes_b == 80
    assert result.voting_percentage_diff == pytest.approx(11.11, abs=0.01)


def test_overlapping_municipality():
    result = merge([row("Rio Branco", 100)], [row("Rio Branco", 60)])

    assert as_tuples(result) == [("Rio Branco", 100, 60)]


def test_empty_inputs_are_zero_safe():
    result = merge([], [])

    assert result.per_municipality == []
    assert result.total_votes_a == 0
    assert result.total_votes_b == 0
    assert result.voting_percentage_diff == 0


def test_one_side_empty():
    result = merge([row("Xapuri", 30)], [])

    assert result.voting_percentage_diff == 100.0
    assert as_tuples(result) == [("Xapuri", 30, 0)]


def test_every_municipality_appears_once_and_votes_are_conserved():
    rows_a = [row("A", 10), row("B", 20), row("C", 5), row("A", 1)]
    rows_b = [row("B", 7), row("D", 9), row("E", 0)]

    result = merge(rows_a, rows_b)
    names = [m.municipality_name for m in result.per_municipality]

    assert sorted(names) == ["A", "B", "C", "D", "E"]
    assert len(names) == len(set(names))
    assert sum(m.votes_candidate_a for m in result.per_municipality) == sum(r.total_votes for r in rows_a)
    assert sum(m.votes_candidate_b for m in result.per_municipality) == sum(r.total_votes for r in rows_b)


def test_merge_is_idempotent():
    rows_a = [row("Rio Branco", 100), row("Feijó", 12)]
    rows_b = [row("Rio Branco", 60)]

    assert merge(rows_a, rows_b) == merge(rows_a, rows_b)


def test_percentage_diff_sign():
    assert percentage_diff(0, 0) == 0.0
    assert percentage_diff(25, 75) == -50.0


def test_top_municipalities_ranks_by_combined_votes():
    result = merge(
        [row("A", 10), row("B", 50), row("C", 1)],
        [row("A", 45), row("D", 30), row("C", 1)],
    )

    top = top_municipalities(result, n=2)

    assert [m.municipality_name for m in top] == ["A", "B"]
    assert top_municipalities(result, n=0) == []


def test_rank_party_votes():
    ranked = rank_party_votes([
        {"sg_partido": "PT", "qt_votos": 10},
        {"sg_partido": "PP", "qt_votos": 30},
        {"sg_partido": "PT", "qt_votos": 25},
        {"sg_partido": None, "qt_votos": 99},
    ], limit=1)

    assert [(p.party, p.votes) for p in ranked] == [("PT", 35)]
