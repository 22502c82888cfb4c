"""
Verification Worker Configuration
=================================

Loads all environment variables for the verification worker.

Environment variables should be set in .env file in project root.
Missing credentials do not fail at import time; call validate_config()
before running a tick.
"""

import os
from dotenv import load_dotenv

from verification_worker.exceptions import WorkerConfigError

# Load environment variables from .env file
load_dotenv()


# Malformed values found while loading; reported by validate_config()
_LOAD_ERRORS = []


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _LOAD_ERRORS.append(f"{name} must be an integer, got {value!r}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# Build Info
# ============================================================
BUILD_ID = os.getenv("BUILD_ID", "dev-local")

# ============================================================
# Supabase PostgreSQL (lead store + verification batches)
# ============================================================
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SERVICE_ROLE_KEY")

BATCH_TABLE = os.getenv("VERIFICATION_BATCH_TABLE", "email_verification_files")
LEAD_TABLE = os.getenv("LEAD_TABLE", "leads")

# ============================================================
# EmailListVerify (bulk verification provider)
# ============================================================
EMAIL_LIST_VERIFY_KEY = os.getenv("EMAIL_LIST_VERIFY_KEY") or os.getenv("ELV_API_KEY")
ELV_STATUS_URL = os.getenv("ELV_STATUS_URL", "https://apps.emaillistverify.com/api/getApiFileInfo")
PROVIDER_TIMEOUT_SECONDS = _env_int("PROVIDER_TIMEOUT_SECONDS", 60)

# ============================================================
# Tick Limits
# ============================================================
MAX_BATCHES_PER_TICK = _env_int("MAX_BATCHES_PER_TICK", 20)  # Oldest-first page size
LEAD_UPDATE_CHUNK_SIZE = _env_int("LEAD_UPDATE_CHUNK_SIZE", 100)  # Lead ids per update request

# ============================================================
# Logging
# ============================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _env_bool("LOG_JSON", True)


# ============================================================
# Configuration Validation
# ============================================================

def validate_config():
    """
    Validates that all required configuration is present.
    Called before every tick and on application startup.
    """
    errors = list(_LOAD_ERRORS)

    if not SUPABASE_URL:
        errors.append("SUPABASE_URL is not set")
    if not SUPABASE_SERVICE_ROLE_KEY:
        errors.append("SUPABASE_SERVICE_ROLE_KEY is not set")
    if not EMAIL_LIST_VERIFY_KEY:
        errors.append("EMAIL_LIST_VERIFY_KEY is not set")

    if MAX_BATCHES_PER_TICK <= 0:
        errors.append("MAX_BATCHES_PER_TICK must be positive")
    if LEAD_UPDATE_CHUNK_SIZE <= 0:
        errors.append("LEAD_UPDATE_CHUNK_SIZE must be positive")

    if errors:
        raise WorkerConfigError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))

    return True


def config_summary() -> dict:
    """
    Summary of the configuration for startup logging.
    NEVER includes secrets!
    """
    return {
        "build_id": BUILD_ID,
        "supabase_url": SUPABASE_URL,
        "supabase_key_set": bool(SUPABASE_SERVICE_ROLE_KEY),
        "provider_key_set": bool(EMAIL_LIST_VERIFY_KEY),
        "status_url": ELV_STATUS_URL,
        "batch_table": BATCH_TABLE,
        "lead_table": LEAD_TABLE,
        "max_batches_per_tick": MAX_BATCHES_PER_TICK,
        "lead_update_chunk_size": LEAD_UPDATE_CHUNK_SIZE,
        "provider_timeout_seconds": PROVIDER_TIMEOUT_SECONDS,
    }
