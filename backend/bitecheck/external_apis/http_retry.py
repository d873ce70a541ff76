"""
HTTP requests for product providers: retry transport failures with exponential backoff.
Never raises for transport errors; callers get (response, None) or (None, error_message).
HTTP error statuses come back as responses; each provider decides what a 4xx/5xx means.
"""
import logging
import time
from typing import Any, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF = 1.0

HttpResult = Tuple[Optional[requests.Response], Optional[str]]


def _describe(exc: requests.RequestException) -> str:
    if isinstance(exc, requests.Timeout):
        return f"timeout ({type(exc).__name__}): {exc}"
    return f"{type(exc).__name__}: {exc}"


def backoff_delay(attempt: int, initial_backoff: float) -> float:
    """Delay before retry number attempt+1 (attempt is 0-based): 1x, 2x, 4x ..."""
    return initial_backoff * (2 ** attempt)


def request_with_retries(
    method: str,
    url: str,
    params: Optional[dict] = None,
    data: Optional[dict] = None,
    headers: Optional[dict] = None,
    auth: Optional[Tuple[str, str]] = None,
    timeout: float = 10,
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    session: Optional[requests.Session] = None,
) -> HttpResult:
    sender: Any = session if session is not None else requests
    attempts = max(1, max_retries)
    error: Optional[str] = None
    for attempt in range(attempts):
        try:
            return sender.request(
                method, url, params=params or {}, data=data,
                headers=headers, auth=auth, timeout=timeout,
            ), None
        except requests.RequestException as e:
            error = _describe(e)
        logger.warning(
            "EXTERNAL_API %s failed attempt=%s/%s url=%s error=%s",
            method, attempt + 1, attempts, url[:60], error,
        )
        if attempt + 1 < attempts:
            delay = backoff_delay(attempt, initial_backoff)
            logger.info("EXTERNAL_API backoff %.1fs before retry", delay)
            time.sleep(delay)
    return None, error


def get_with_retries(url: str, params: Optional[dict] = None, **kwargs: Any) -> HttpResult:
    return request_with_retries("GET", url, params=params, **kwargs)
