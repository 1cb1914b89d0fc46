import asyncio
import os

import pytest
from fastapi.testclient import TestClient

# Never reach a real database from the test suite
os.environ["DATABASE_URL"] = ""

from app.dependencies import get_data_source  # noqa: E402
from app.exceptions import DataSourceError  # noqa: E402
from app.main import app  # noqa: E402


YEAR = 2022

CANDIDATES = {
    1001: {
        "sq_candidato": 1001,
        "nm_candidato": "GLADSON DE LIMA CAMELI",
        "nm_urna_candidato": "GLADSON CAMELI",
        "nr_candidato": 11,
        "sg_partido": "PP",
        "cd_cargo": 3,
        "ds_cargo": "GOVERNADOR",
        "ano_eleicao": YEAR,
        "ds_sit_tot_turno": "ELEITO",
    },
    1002: {
        "sq_candidato": 1002,
        "nm_candidato": "JORGE NEY VIANA MACEDO NEVES",
        "nm_urna_candidato": "JORGE VIANA",
        "nr_candidato": 13,
        "sg_partido": "PT",
        "cd_cargo": 3,
        "ds_cargo": "GOVERNADOR",
        "ano_eleicao": YEAR,
        "ds_sit_tot_turno": "NÃO ELEITO",
    },
    1003: {
        "sq_candidato": 1003,
        "nm_candidato": "MARCIO MIGUEL BITTAR",
        "nm_urna_candidato": "MARCIO BITTAR",
        "nr_candidato": 44,
        "sg_partido": "UNIÃO",
        "cd_cargo": 3,
        "ds_cargo": "GOVERNADOR",
        "ano_eleicao": YEAR,
    },
}

MUNICIPALITY_VOTES = {
    1001: [
        {"nm_municipio": "RIO BRANCO", "total_votos": 100, "percentual_votos": 50.0},
        {"nm_municipio": "XAPURI", "total_votos": 30, "percentual_votos": 40.0},
    ],
    1002: [
        {"nm_municipio": "RIO BRANCO", "total_votos": 60, "percentual_votos": 30.0},
        {"nm_municipio": "CRUZEIRO DO SUL", "total_votos": 80, "percentual_votos": 40.0},
    ],
    1003: [
        {"nm_municipio": "FEIJÓ", "total_votos": 20, "percentual_votos": 10.0},
    ],
}


class FakeDataSource:
    """In-memory ``ElectionDataSource`` with switchable failures and delays."""

    def __init__(self):
        self.candidates = {k: dict(v) for k, v in CANDIDATES.items()}
        self.municipality_votes = {k: [dict(r) for r in v] for k, v in MUNICIPALITY_VOTES.items()}
        self.failing_votes = set()
        self.failing_identities = set()
        self.fail_lookup = False
        self.vote_delays = {}
        self.vote_gates = {}
        self.calls = []
        self.offices = [
            {"cd_cargo": 3, "ds_cargo": "GOVERNADOR"},
            {"cd_cargo": 5, "ds_cargo": "SENADOR"},
        ]
        self.metrics = {
            "total_votes": [{"sum": 450000}],
            "top_municipio": [{"nm_municipio": "RIO BRANCO"}],
            "percent_by_cargo": [
                {"ds_cargo": "GOVERNADOR", "percentual": 25.5},
                {"ds_cargo": "SENADOR", "percentual": 24.5},
            ],
            "total_expenses": [{"sum": 12500000.0}],
        }
        self.party_rows = [
            {"sg_partido": "PP", "qt_votos": 200},
            {"sg_partido": "PT", "qt_votos": 150},
            {"sg_partido": "UNIÃO", "qt_votos": 20},
        ]

    async def lookup_candidates(self, term, year, limit, office_code=None):
        self.calls.append(("lookup_candidates", term, year, limit, office_code))
        if self.fail_lookup:
            raise DataSourceError("search failed")
        term = term.lower()
        rows = [
            row for row in self.candidates.values()
            if row["ano_eleicao"] == year
            and (term in row["nm_urna_candidato"].lower() or term in row["nm_candidato"].lower())
            and (office_code is None or row["cd_cargo"] == office_code)
        ]
        rows.sort(key=lambda r: r["nm_urna_candidato"])
        return rows[:limit]

    async def get_candidate_identity(self, candidate_id, year):
        self.calls.append(("get_candidate_identity", candidate_id, year))
        if candidate_id in self.failing_identities:
            raise DataSourceError("identity fetch failed")
        row = self.candidates.get(candidate_id)
        if row is None or row["ano_eleicao"] != year:
            return None
        return row

    async def get_votes_by_municipality(self, candidate_id, year):
        self.calls.append(("get_votes_by_municipality", candidate_id, year))
        if candidate_id in self.vote_gates:
            await self.vote_gates[candidate_id].wait()
        if candidate_id in self.vote_delays:
            await asyncio.sleep(self.vote_delays[candidate_id])
        if candidate_id in self.failing_votes:
            raise DataSourceError("votes fetch failed")
        return self.municipality_votes.get(candidate_id, [])

    async def get_votes_by_city(self, candidate_id, year):
        return [
            {"nm_municipio": "RIO BRANCO", "total_votos": 100, "percentual_votos": 50.0,
             "latitude": -9.97499, "longitude": -67.8243},
            {"nm_municipio": "XAPURI", "total_votos": 30, "percentual_votos": 40.0,
             "latitude": None, "longitude": None},
        ]

    async def get_votes_by_neighborhood(self, candidate_id, year, municipality_code=None):
        self.calls.append(("get_votes_by_neighborhood", candidate_id, year, municipality_code))
        return [
            {"nm_bairro": "CENTRO", "total_votos": "42", "percentual_votos": 12.5},
            {"nm_bairro": None, "total_votos": 7, "percentual_votos": 1.0},
        ]

    async def get_offices(self, year):
        self.calls.append(("get_offices", year))
        return self.offices

    async def get_candidate_total_votes(self, candidate_id, year, municipality_code=None):
        return [{"total_votos": 130}]

    async def get_candidate_top_city(self, candidate_id, year):
        return [{"nm_municipio": "RIO BRANCO", "total_votos": 100}]

    async def get_candidate_vote_percentage(self, candidate_id, year, office_code=None):
        return [{"percentage": 52.3}]

    async def get_candidate_total_expenses(self, candidate_id, year):
        return [{"total_expenses": 987654.32}]

    async def get_election_metrics(self):
        self.calls.append(("get_election_metrics",))
        return self.metrics

    async def get_party_vote_rows(self, year, office_code=None, municipality_code=None):
        self.calls.append(("get_party_vote_rows", year, office_code, municipality_code))
        return self.party_rows


@pytest.fixture
def data_source():
    return FakeDataSource()


@pytest.fixture
def client(data_source):
    """Test client whose routes read from the in-memory data source."""
    app.dependency_overrides[get_data_source] = lambda: data_source

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
