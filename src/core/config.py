"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("SCHEDULE_DB_PATH", str(PROJECT_ROOT / "data" / "db" / "salon-schedule.db"))
)
LOG_DIR = Path(os.environ.get("LOG_DIR", str(PROJECT_ROOT / "logs")))

# =============================================================================
# SCHEDULE CONFIGURATION
# =============================================================================

# Template day order; index is the offset from the week start (weeks start on Sunday)
DAY_NAMES = [
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
]

ENTRY_STATUSES = {"scheduled", "active", "completed", "absent", "cancelled"}
REQUEST_STATUSES = {"pending", "approved", "rejected", "modified"}

MAX_REPEAT_WEEKS = int(os.environ.get("MAX_REPEAT_WEEKS", "12"))

# =============================================================================
# PREFERENCES
# =============================================================================

PREFERENCES_BACKEND = os.environ.get("PREFERENCES_BACKEND", "sqlite")  # sqlite | file | memory
PREFERENCES_FILE = Path(
    os.environ.get("PREFERENCES_FILE", str(PROJECT_ROOT / "data" / "preferences.json"))
)

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "false").lower() == "true"

# =============================================================================
# API CONFIGURATION
# =============================================================================

SCHEDULE_API_KEY = os.environ.get("SCHEDULE_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
API_REQUEST_LOGGING = os.environ.get("API_REQUEST_LOGGING", "true").lower() == "true"
