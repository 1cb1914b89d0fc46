"""PostgreSQL (Supabase) data service: candidate tables and vote procedures."""

from typing import Any, Dict, List, Optional, Protocol

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from ..config import DATABASE_URL, POOL_MAX_SIZE, POOL_MIN_SIZE
from ..exceptions import DataSourceError
from ..logging import get_logger


logger = get_logger(__name__)

Row = Dict[str, Any]

CANDIDATE_COLUMNS = """
    sq_candidato,
    nm_candidato,
    nm_urna_candidato,
    nr_candidato,
    sg_partido,
    cd_cargo,
    ds_cargo,
    ano_eleicao
"""

IDENTITY_COLUMNS = CANDIDATE_COLUMNS + """,
    img_candidato,
    cd_situacao_candidatura,
    ds_situacao_candidatura,
    cd_sit_tot_turno,
    ds_sit_tot_turno
"""


class ElectionDataSource(Protocol):
    """Read operations the dashboard needs from the election database.

    Every method raises ``DataSourceError`` when the backend fails.
    """

    async def lookup_candidates(self, term: str, year: int, limit: int, office_code: Optional[int] = None) -> List[Row]: ...

    async def get_candidate_identity(self, candidate_id: int, year: int) -> Optional[Row]: ...

    async def get_votes_by_municipality(self, candidate_id: int, year: int) -> List[Row]: ...

    async def get_votes_by_city(self, candidate_id: int, year: int) -> List[Row]: ...

    async def get_votes_by_neighborhood(self, candidate_id: int, year: int, municipality_code: Optional[int] = None) -> List[Row]: ...

    async def get_offices(self, year: int) -> List[Row]: ...

    async def get_candidate_total_votes(self, candidate_id: int, year: int, municipality_code: Optional[int] = None) -> List[Row]: ...

    async def get_candidate_top_city(self, candidate_id: int, year: int) -> List[Row]: ...

    async def get_candidate_vote_percentage(self, candidate_id: int, year: int, office_code: Optional[int] = None) -> List[Row]: ...

    async def get_candidate_total_expenses(self, candidate_id: int, year: int) -> List[Row]: ...

    async def get_election_metrics(self) -> Dict[str, List[Row]]: ...

    async def get_party_vote_rows(self, year: int, office_code: Optional[int] = None, municipality_code: Optional[int] = None) -> List[Row]: ...


# Connection pool (initialized by app lifespan)
_pool: Optional[AsyncConnectionPool] = None


async def init_pool():
    """Initialize and open the connection pool."""
    global _pool
    if _pool is None:
        _pool = AsyncConnectionPool(DATABASE_URL, min_size=POOL_MIN_SIZE, max_size=POOL_MAX_SIZE, open=False)
        await _pool.open()


async def close_pool():
    """Close the connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


def get_pool() -> Optional[AsyncConnectionPool]:
    """Get the connection pool (None until ``init_pool`` has run)."""
    return _pool


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresDataSource:
    """``ElectionDataSource`` backed by the Supabase Postgres database."""

    def __init__(self, pool: Optional[AsyncConnectionPool]):
        self._pool = pool

    async def _fetch_all(self, query, params=None) -> List[Row]:
        if self._pool is None:
            raise DataSourceError("Database is not configured")
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cursor:
                    await cursor.execute(query, params)
                    return await cursor.fetchall()
        except psycopg.Error as e:
            logger.error("data_source_query_failed", error=str(e))
            raise DataSourceError(f"Database query failed: {e}") from e

    async def _call(self, function: str, **params: Any) -> List[Row]:
        """Call a set-returning stored procedure with named arguments."""
        query = sql.SQL("SELECT * FROM {}({})").format(
            sql.Identifier(function),
            sql.SQL(", ").join(
                sql.SQL("{} => {}").format(sql.Identifier(name), sql.Placeholder(name))
                for name in params
            ),
        )
        return await self._fetch_all(query, params)

    async def lookup_candidates(self, term: str, year: int, limit: int, office_code: Optional[int] = None) -> List[Row]:
        pattern = f"%{escape_like(term)}%"
        params: List[Any] = [year, pattern, pattern]
        office_clause = ""
        if office_code is not None:
            office_clause = "AND cd_cargo = %s"
            params.append(office_code)
        params.append(limit)

        query = f"""
            SELECT {CANDIDATE_COLUMNS}
            FROM candidatos
            WHERE ano_eleicao = %s
                AND (nm_urna_candidato ILIKE %s OR nm_candidato ILIKE %s)
                {office_clause}
            ORDER BY nm_urna_candidato
            LIMIT %s
        """
        return await self._fetch_all(query, params)

    async def get_candidate_identity(self, candidate_id: int, year: int) -> Optional[Row]:
        rows = await self._fetch_all(
            f"""
            SELECT {IDENTITY_COLUMNS}
            FROM candidatos
            WHERE sq_candidato = %s AND ano_eleicao = %s
            LIMIT 1
            """,
            [candidate_id, year],
        )
        return rows[0] if rows else None

    async def get_votes_by_municipality(self, candidate_id: int, year: int) -> List[Row]:
        return await self._call(
            "get_candidate_votes_by_municipality",
            p_sq_candidato=candidate_id,
            p_ano_eleicao=year,
        )

    async def get_votes_by_city(self, candidate_id: int, year: int) -> List[Row]:
        return await self._call("get_votes_by_city", p_ano_eleicao=year, p_sq_candidato=candidate_id)

    async def get_votes_by_neighborhood(self, candidate_id: int, year: int, municipality_code: Optional[int] = None) -> List[Row]:
        return await self._call(
            "get_candidate_votes_by_neighborhood",
            p_sq_candidato=candidate_id,
            p_ano_eleicao=year,
            p_cd_municipio=municipality_code,
        )

    async def get_offices(self, year: int) -> List[Row]:
        return await self._fetch_all(
            """
            SELECT DISTINCT cd_cargo, ds_cargo
            FROM candidatos
            WHERE ano_eleicao = %s AND cd_cargo IS NOT NULL
            ORDER BY ds_cargo
            """,
            [year],
        )

    async def get_candidate_total_votes(self, candidate_id: int, year: int, municipality_code: Optional[int] = None) -> List[Row]:
        return await self._call(
            "get_candidate_total_votes",
            p_sq_candidato=candidate_id,
            p_ano_eleicao=year,
            p_cd_municipio=municipality_code,
        )

    async def get_candidate_top_city(self, candidate_id: int, year: int) -> List[Row]:
        return await self._call("get_candidate_top_city", p_sq_candidato=candidate_id, p_ano_eleicao=year)

    async def get_candidate_vote_percentage(self, candidate_id: int, year: int, office_code: Optional[int] = None) -> List[Row]:
        return await self._call(
            "get_candidate_vote_percentage",
            p_sq_candidato=candidate_id,
            p_ano_eleicao=year,
            p_cd_cargo=office_code,
        )

    async def get_candidate_total_expenses(self, candidate_id: int, year: int) -> List[Row]:
        return await self._call("get_candidate_total_expenses", p_sq_candidato=candidate_id, p_ano_eleicao=year)

    async def get_election_metrics(self) -> Dict[str, List[Row]]:
        return {
            "total_votes": await self._call("total_votes"),
            "top_municipio": await self._call("top_municipio"),
            "percent_by_cargo": await self._call("percent_by_cargo"),
            "total_expenses": await self._call("total_expenses"),
        }

    async def get_party_vote_rows(self, year: int, office_code: Optional[int] = None, municipality_code: Optional[int] = None) -> List[Row]:
        conditions = ["v.ano_eleicao = %s"]
        params: List[Any] = [year]

        if office_code is not None:
            conditions.append("c.cd_cargo = %s")
            params.append(office_code)

        if municipality_code is not None:
            conditions.append("v.cd_municipio = %s")
            params.append(municipality_code)

        query = f"""
            SELECT c.sg_partido, SUM(v.qt_votos) AS qt_votos
            FROM votos v
            JOIN candidatos c ON c.sq_candidato = v.sq_candidato
            WHERE {" AND ".join(conditions)}
            GROUP BY c.sg_partido
        """
        return await self._fetch_all(query, params)
