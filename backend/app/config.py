"""Application configuration management."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from backend directory
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

POOL_MIN_SIZE = int(os.getenv("POOL_MIN_SIZE", "1"))
POOL_MAX_SIZE = int(os.getenv("POOL_MAX_SIZE", "10"))

# Upper bound for a single call to the data service (seconds)
FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "10"))

SEARCH_RESULT_LIMIT = int(os.getenv("SEARCH_RESULT_LIMIT", "10"))
SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))

# Offices, overview metrics and other reference data
REFERENCE_CACHE_TTL_SECONDS = float(os.getenv("REFERENCE_CACHE_TTL_SECONDS", "3600"))

DEFAULT_ELECTION_YEAR = int(os.getenv("DEFAULT_ELECTION_YEAR", "2022"))
AVAILABLE_YEARS = [2018, 2022, 2026]
