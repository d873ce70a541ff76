"""
Feature flags, paths, timeouts and provider credentials.
All resolution relative to the backend directory.
"""
import os
import logging
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)

# Repo root: backend/bitecheck/config.py -> parent=bitecheck, parent.parent=backend, parent.parent.parent=repo
_PACKAGE_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _PACKAGE_DIR.parent
_REPO_ROOT = _BACKEND_DIR.parent


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("CONFIG invalid float %s=%s; using default %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("CONFIG invalid int %s=%s; using default %s", name, raw, default)
        return default


# --- Data paths ---
def get_additives_path() -> Path:
    override = os.environ.get("ADDITIVES_PATH", "").strip()
    if override:
        return Path(override)
    return _PACKAGE_DIR / "knowledge" / "data" / "additives.json"


def get_product_cache_path() -> Path:
    override = os.environ.get("PRODUCT_CACHE_PATH", "").strip()
    if override:
        return Path(override)
    return _REPO_ROOT / "data" / "products.json"


# --- Resolver ---
def get_source_timeout() -> float:
    """Per-provider time limit in seconds; a provider slower than this is skipped."""
    return _env_float("SOURCE_TIMEOUT_SECONDS", 5.0)


def get_http_timeout() -> float:
    return _env_float("PROVIDER_HTTP_TIMEOUT_SECONDS", 4.0)


def get_provider_max_retries() -> int:
    return max(1, _env_int("PROVIDER_MAX_RETRIES", 1))


def get_resolver_concurrent() -> bool:
    return _env_flag("RESOLVER_CONCURRENT", "false")


# --- External APIs (lazy read from env) ---
def get_open_food_facts_enabled() -> bool:
    return _env_flag("OPEN_FOOD_FACTS_ENABLED", "true")


def get_upcitemdb_enabled() -> bool:
    return _env_flag("UPCITEMDB_ENABLED", "true")


def get_fatsecret_credentials() -> Tuple[str, str]:
    return (
        os.environ.get("FATSECRET_CLIENT_ID", "").strip(),
        os.environ.get("FATSECRET_CLIENT_SECRET", "").strip(),
    )


def get_edamam_credentials() -> Tuple[str, str]:
    return (
        os.environ.get("EDAMAM_APP_ID", "").strip(),
        os.environ.get("EDAMAM_APP_KEY", "").strip(),
    )


# --- Barcode scanner ---
def get_scan_settle_seconds() -> float:
    return _env_float("SCAN_SETTLE_SECONDS", 1.0)


def get_scan_vote_window_seconds() -> float:
    return _env_float("SCAN_VOTE_WINDOW_SECONDS", 1.2)


def get_scan_min_votes() -> int:
    return _env_int("SCAN_MIN_VOTES", 3)


def get_scan_rounds_needed() -> int:
    return _env_int("SCAN_ROUNDS_NEEDED", 2)


# --- Startup logging ---
def log_config() -> None:
    fs_id, fs_secret = get_fatsecret_credentials()
    ed_id, ed_key = get_edamam_credentials()
    logger.info(
        "CONFIG: additives=%s product_cache=%s source_timeout=%.1fs http_timeout=%.1fs "
        "max_retries=%d concurrent=%s off_enabled=%s upcitemdb_enabled=%s "
        "fatsecret_key=%s edamam_key=%s",
        get_additives_path().exists(), get_product_cache_path(),
        get_source_timeout(), get_http_timeout(), get_provider_max_retries(),
        get_resolver_concurrent(), get_open_food_facts_enabled(), get_upcitemdb_enabled(),
        bool(fs_id and fs_secret), bool(ed_id and ed_key),
    )
