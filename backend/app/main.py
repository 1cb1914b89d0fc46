"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import CORS_ORIGINS, DATABASE_URL, REFERENCE_CACHE_TTL_SECONDS
from .exceptions import ElectionDataError, status_code_for
from .logging import get_logger, setup_logging
from .routers import candidates, comparative, dashboard, live, votes
from .services.cache import ReferenceCache
from .services.database import init_pool, close_pool


setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan (startup and shutdown)."""
    # Startup
    app.state.reference_cache = ReferenceCache(REFERENCE_CACHE_TTL_SECONDS)
    if DATABASE_URL:
        await init_pool()
    else:
        logger.warning("database_url_missing")
    yield
    # Shutdown
    await close_pool()


app = FastAPI(
    title="Election Results API",
    description="Candidate search, vote breakdowns and candidate comparison",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ElectionDataError)
async def election_data_error_handler(request: Request, exc: ElectionDataError):
    """Translate service errors into a JSON error response."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Register routers
app.include_router(candidates.router)
app.include_router(comparative.router)
app.include_router(votes.router)
app.include_router(dashboard.router)
app.include_router(live.router)


@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": "Election Results API",
        "version": "1.0.0",
        "endpoints": {
            "search": "/api/candidates/search",
            "stats": "/api/candidates/{candidate_id}/stats",
            "comparative": "/api/comparative",
            "votes": "/api/votes/{municipalities,cities,neighborhoods}",
            "overview": "/api/overview",
            "filters": "/api/filters",
            "live_search": "/ws/candidates/search",
            "live_comparative": "/ws/comparative"
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
