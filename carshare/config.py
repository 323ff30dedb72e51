import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file
load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def data_path_from_env():
    """Pickle file for the store; an empty CARSHARE_DATA_PATH keeps data in memory."""
    value = os.getenv("CARSHARE_DATA_PATH")
    if value is None:
        return str(DEFAULT_DATA_PATH)
    return value.strip() or None


def load_config() -> dict:
    """Build the Flask config mapping from the environment."""
    return {
        "SECRET_KEY": os.getenv("SECRET_KEY", "dev-secret-change-me"),
        "DATA_PATH": data_path_from_env(),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "ENFORCE_STATUS_TRANSITIONS": env_flag("ENFORCE_STATUS_TRANSITIONS", True),
        "MAX_PAGE_SIZE": int(os.getenv("MAX_PAGE_SIZE", "100")),
        "JSON_SORT_KEYS": False,
    }


def setup_logging(level: str = "INFO"):
    """Configure logging for the application"""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )
