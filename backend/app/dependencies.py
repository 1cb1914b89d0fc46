"""FastAPI dependencies shared by the routers."""

from fastapi import Depends
from fastapi.requests import HTTPConnection

from .services.cache import ReferenceCache
from .services.database import ElectionDataSource, PostgresDataSource, get_pool
from .services.lookup import CandidateLookup
from .services.orchestrator import ComparisonOrchestrator


def get_data_source() -> ElectionDataSource:
    return PostgresDataSource(get_pool())


def get_reference_cache(connection: HTTPConnection) -> ReferenceCache:
    return connection.app.state.reference_cache


def get_orchestrator(data_source: ElectionDataSource = Depends(get_data_source)) -> ComparisonOrchestrator:
    return ComparisonOrchestrator(data_source)


def get_lookup(data_source: ElectionDataSource = Depends(get_data_source)) -> CandidateLookup:
    return CandidateLookup(data_source)
