"""Error taxonomy shared by the services and the HTTP layer."""


class ElectionDataError(Exception):
    """Base class for election data failures."""


class ValidationError(ElectionDataError):
    """Required input is missing or malformed."""


class NotFoundError(ElectionDataError):
    """A requested candidate does not exist for the given year."""


class DataSourceError(ElectionDataError):
    """The external data service failed or timed out."""


class StaleResponseError(ElectionDataError):
    """A response arrived after a newer request superseded it.

    Internal only: callers discard it instead of reporting a failure.
    """


STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    DataSourceError: 503,
}


def status_code_for(exc: ElectionDataError) -> int:
    """HTTP status used when ``exc`` reaches a client."""
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500
