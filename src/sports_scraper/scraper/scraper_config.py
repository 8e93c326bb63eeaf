# src/sports_scraper/scraper/scraper_config.py
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from dotenv import load_dotenv
import logging
import os

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, returning default on missing/invalid values."""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# --- Store ---
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "sportsdata")
SCHEDULE_COLLECTION = os.getenv("SCHEDULE_COLLECTION", "schedules")

# --- Source pages ---
# Live and historical pages take /<season>/REG<week> appended.
NFL_LIVE_URL = os.getenv("NFL_LIVE_URL", "http://www.nfl.com/scores")
NFL_HISTORICAL_URL = os.getenv("NFL_HISTORICAL_URL", "http://www.nfl.com/schedules")
NFL_CURRENT_URL = os.getenv("NFL_CURRENT_URL", "http://www.nfl.com/schedules")

# --- Fetching / parsing ---
FETCH_BACKEND = os.getenv("FETCH_BACKEND", "requests")  # "requests" or "browser"
FETCH_TIMEOUT = _env_int("FETCH_TIMEOUT", 10)
WRITEBACK_WORKERS = _env_int("WRITEBACK_WORKERS", 4)
SKIP_INVALID_ROWS = _env_bool("SKIP_INVALID_ROWS", False)

# --- Process ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = _env_int("API_PORT", 5000)


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Process-wide logging setup. Call once from an entry point."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_mongo_client(uri: str = MONGO_URI, db_name: str = DB_NAME):
    """Returns a MongoDB database object for the schedule DB, or None if unreachable."""
    if not uri:
        logger.error("MONGO_URI not found. Check your .env file or environment variables.")
        return None

    try:
        client = MongoClient(uri)

        # Ping the server to confirm a successful connection
        client.admin.command('ping')
        logger.info(f"MongoDB connection successful. Using database: '{db_name}'")
        return client[db_name]
    except PyMongoError as e:
        logger.error(f"Error connecting to MongoDB: {e}")
        return None
