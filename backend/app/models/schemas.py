"""Pydantic models for request/response validation."""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class CandidateIdentity(BaseModel):
    """Candidate identity as registered for one election year."""
    model_config = ConfigDict(frozen=True)

    candidate_id: int
    display_name: str
    ballot_name: str
    ballot_number: Optional[int] = None
    party_abbreviation: str = ""
    office_code: Optional[int] = None
    office_label: Optional[str] = None
    election_year: Optional[int] = None
    photo_url: Optional[str] = None
    candidacy_status: Optional[str] = None
    result_status: Optional[str] = None


class MunicipalityVoteRow(BaseModel):
    """Votes received by one candidate in one municipality (or neighborhood)."""
    model_config = ConfigDict(frozen=True)

    municipality_name: str
    total_votes: int = Field(ge=0)
    vote_percentage: float = Field(ge=0, le=100)


class CityVotePoint(MunicipalityVoteRow):
    """Municipality vote row with coordinates for map markers."""
    latitude: float
    longitude: float


class MunicipalityComparison(BaseModel):
    """Votes of both compared candidates in one municipality."""
    municipality_name: str
    votes_candidate_a: int = 0
    votes_candidate_b: int = 0


class ComparisonResult(BaseModel):
    """Merged per-municipality votes, totals and percentage differential."""
    per_municipality: List[MunicipalityComparison]
    total_votes_a: int
    total_votes_b: int
    voting_percentage_diff: float


class ComparisonOutcome(BaseModel):
    """Comparison response: both identities plus the merged votes."""
    candidate_a: CandidateIdentity
    candidate_b: CandidateIdentity
    comparison: ComparisonResult
    top_municipalities: List[MunicipalityComparison]
    unavailable: List[str] = []


class ComparisonRequest(BaseModel):
    """Comparison request as sent by the dashboard."""
    model_config = ConfigDict(populate_by_name=True)

    candidate_a_id: Optional[Union[int, str]] = Field(None, alias="candidate1Id")
    candidate_b_id: Optional[Union[int, str]] = Field(None, alias="candidate2Id")
    year: Optional[Union[int, str]] = None


class LiveSearchMessage(BaseModel):
    """One keystroke update from the search box."""
    term: str = ""
    year: Optional[int] = None
    office: Optional[int] = None


class CandidateSearchResponse(BaseModel):
    """Candidate search results."""
    data: List[CandidateIdentity]


class VoteRowsResponse(BaseModel):
    """Vote breakdown rows for one candidate."""
    data: List[MunicipalityVoteRow]


class CityPointsResponse(BaseModel):
    """Geo-tagged vote rows for one candidate."""
    data: List[CityVotePoint]


class TopCity(BaseModel):
    """Municipality where a candidate received the most votes."""
    name: str = ""
    votes: int = 0


class CandidateStats(BaseModel):
    """Headline numbers for one candidate."""
    candidate_id: int
    year: int
    total_votes: int
    top_city: TopCity
    vote_percentage: float
    total_expenses: float


class Office(BaseModel):
    """Elected position (cargo)."""
    code: int
    label: str


class Municipality(BaseModel):
    """Municipality filter option."""
    code: int
    name: str


class FilterOptions(BaseModel):
    """Available filter options."""
    years: List[int]
    offices: List[Office]
    municipalities: List[Municipality]


class OfficeShare(BaseModel):
    """Share of all votes cast for one office."""
    office_label: str
    percentage: float


class PartyVotes(BaseModel):
    """Votes received by a party's candidates."""
    party: str
    votes: int


class ElectionMetrics(BaseModel):
    """Election-wide totals computed by the backend."""
    total_votes: int = 0
    top_municipality: Optional[str] = None
    percent_by_office: List[OfficeShare] = []
    total_expenses: float = 0.0


class ElectionOverview(BaseModel):
    """Overview dashboard: election totals plus filtered party ranking."""
    metrics: ElectionMetrics
    party_votes: List[PartyVotes]
