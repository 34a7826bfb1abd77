"""Fuzzy search settings from environment."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root (holds trigram/, trigram_server/, trigram_client/, backend/)
ROOT_DIR = Path(__file__).resolve().parent.parent.parent

# Load .env from backend directory; real environment variables win
load_dotenv(str(ROOT_DIR / "backend" / ".env"))

# DB
DATA_DIR = ROOT_DIR / "backend" / "data"
DATABASE_URL = os.environ.get("FUZZY_DATABASE_URL", f"sqlite:///{DATA_DIR / 'fuzzy.db'}")
DATABASE_ECHO = os.environ.get("FUZZY_DATABASE_ECHO", "").lower() in ("1", "true", "yes")
if "FUZZY_DATABASE_URL" not in os.environ:
    DATA_DIR.mkdir(parents=True, exist_ok=True)

# Matching
DEFAULT_THRESHOLD = float(os.environ.get("FUZZY_DEFAULT_THRESHOLD", 5))
if not 0 <= DEFAULT_THRESHOLD <= 100:
    raise ValueError(f"FUZZY_DEFAULT_THRESHOLD must be within 0..100, got {DEFAULT_THRESHOLD}")
MAX_QUERY_LENGTH = int(os.environ.get("FUZZY_MAX_QUERY_LENGTH", 500))

# Logging
LOG_LEVEL = os.environ.get("FUZZY_LOG_LEVEL", "INFO").upper()
