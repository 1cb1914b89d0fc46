"""Normalize raw data-service rows into canonical vote and candidate models.

Each stored procedure returns flat key/value rows with its own column names
(``nm_municipio`` vs ``nm_bairro``, ``percentual_votos`` vs ``percentual``).
A ``RowShape`` describes one endpoint's columns so that every endpoint goes
through the same ``normalize`` call.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..logging import get_logger
from ..models.schemas import CandidateIdentity, CityVotePoint, MunicipalityVoteRow


logger = get_logger(__name__)


RawRow = Mapping[str, Any]


@dataclass(frozen=True)
class RowShape:
    """Column aliases for one endpoint's vote rows."""
    name_fields: Tuple[str, ...]
    votes_fields: Tuple[str, ...]
    percent_fields: Tuple[str, ...]


MUNICIPALITY_SHAPE = RowShape(
    name_fields=("nm_municipio",),
    votes_fields=("total_votos", "qt_votos"),
    percent_fields=("percentual_votos",),
)

NEIGHBORHOOD_SHAPE = RowShape(
    name_fields=("nm_bairro",),
    votes_fields=("total_votos", "qt_votos"),
    percent_fields=("percentual_votos",),
)

CITY_SHAPE = RowShape(
    name_fields=("nm_municipio", "nm_cidade"),
    votes_fields=("total_votos", "qt_votos"),
    percent_fields=("percentual_votos", "percentual"),
)

# Rows already reshaped for the dashboard ({name, votes, percentage})
FORMATTED_SHAPE = RowShape(
    name_fields=("name",),
    votes_fields=("votes",),
    percent_fields=("percentage",),
)


def _first(row: RawRow, fields: Iterable[str]) -> Any:
    for field in fields:
        value = row.get(field)
        if value is not None:
            return value
    return None


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        if isinstance(value, (int, Decimal, float)):
            return max(0, int(value))
        return max(0, int(Decimal(str(value).strip())))
    except (ArithmeticError, ValueError, TypeError):
        logger.warning("unparseable_vote_count", value=str(value))
        return 0


def _to_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (ValueError, TypeError):
        logger.warning("unparseable_percentage", value=str(value))
        return 0.0
    # NaN fails every comparison; treat it like a missing value
    return number if number == number else 0.0


def _clean_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    name = str(value).strip()
    return name or None


def _vote_fields(row: RawRow, shape: RowShape) -> Optional[Dict[str, Any]]:
    name = _clean_name(_first(row, shape.name_fields))
    if name is None:
        return None

    percentage = min(100.0, max(0.0, _to_float(_first(row, shape.percent_fields))))

    return {
        "municipality_name": name,
        "total_votes": _to_int(_first(row, shape.votes_fields)),
        "vote_percentage": percentage,
    }


def normalize(raw_rows: Iterable[RawRow], shape: RowShape = MUNICIPALITY_SHAPE) -> List[MunicipalityVoteRow]:
    """Convert raw rows into ``MunicipalityVoteRow``s.

    Rows without a location name are upstream data gaps and are dropped.
    Vote counts or percentages that do not parse as numbers count as 0.
    The input rows are never modified.
    """
    rows = []
    for raw in raw_rows:
        fields = _vote_fields(raw, shape)
        if fields is not None:
            rows.append(MunicipalityVoteRow(**fields))
    return rows


def normalize_city_points(raw_rows: Iterable[RawRow], shape: RowShape = CITY_SHAPE) -> List[CityVotePoint]:
    """Like ``normalize`` but keeps only rows that can be placed on a map."""
    points = []
    for raw in raw_rows:
        try:
            latitude = float(raw["latitude"])
            longitude = float(raw["longitude"])
        except (KeyError, TypeError, ValueError):
            continue
        fields = _vote_fields(raw, shape)
        if fields is None:
            continue
        points.append(CityVotePoint(latitude=latitude, longitude=longitude, **fields))
    return points


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def to_candidate_identity(row: RawRow) -> CandidateIdentity:
    """Map a raw ``candidatos`` row to a ``CandidateIdentity``.

    Raises KeyError/ValueError when the row has no usable candidate id.
    """
    ballot_name = row.get("nm_urna_candidato") or row.get("nm_candidato") or ""
    return CandidateIdentity(
        candidate_id=int(row["sq_candidato"]),
        display_name=row.get("nm_candidato") or ballot_name,
        ballot_name=ballot_name,
        ballot_number=_optional_int(row.get("nr_candidato")),
        party_abbreviation=row.get("sg_partido") or "",
        office_code=_optional_int(row.get("cd_cargo")),
        office_label=row.get("ds_cargo"),
        election_year=_optional_int(row.get("ano_eleicao")),
        photo_url=row.get("img_candidato"),
        candidacy_status=row.get("ds_situacao_candidatura"),
        result_status=row.get("ds_sit_tot_turno"),
    )
