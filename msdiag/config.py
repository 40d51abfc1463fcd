"""
MS Diagnosis Service — Configuration
====================================
Centralised settings read from the environment.
Loads overrides from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

APP_TITLE = "MS Diagnosis 2024 API"
APP_VERSION = "1.0.0"

# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("MSDIAG_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("MSDIAG_LOG_FILE", "")        # empty = console only

# ── HTTP ────────────────────────────────────────────────────────────────
CORS_ORIGINS = [o.strip() for o in os.getenv("MSDIAG_CORS_ORIGINS", "*").split(",") if o.strip()]

# ── Wizard sessions (in-memory only) ────────────────────────────────────
MAX_SESSIONS = int(os.getenv("MSDIAG_MAX_SESSIONS", "1000"))
SESSION_TTL = float(os.getenv("MSDIAG_SESSION_TTL", "3600"))  # idle seconds before eviction

RULE_SOURCE = (
    "Diagnosis of multiple sclerosis: 2024 revisions of the McDonald criteria "
    "(The Lancet Neurology)."
)
