"""HTTP client utilities with timeout and retry logic."""

import math
import time
from typing import Any

import httpx

from .. import __version__
from .exceptions import APIError, AuthenticationError, QuotaExceededError, RateLimitError

USER_AGENT = f"brainus-ai-python/{__version__}"

BACKOFF_BASE_SECONDS = 1.0
BACKOFF_MAX_SECONDS = 10.0

NO_STORE_MESSAGE = "No store_id provided and no default store configured"


def get_http_client(
    timeout: float, transport: httpx.BaseTransport | None = None
) -> httpx.Client:
    """Get configured httpx client for a single request attempt.

    Args:
        timeout: Timeout in seconds applied to every phase of the request
        transport: Optional transport override (mock transports, proxies)

    Returns:
        httpx.Client configured with the given timeout
    """
    return httpx.Client(timeout=httpx.Timeout(timeout), transport=transport)


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after a failed attempt: 1, 2, 4, 8, capped at 10."""
    return min(BACKOFF_BASE_SECONDS * 2**attempt, BACKOFF_MAX_SECONDS)


def build_headers(api_key: str) -> dict[str, str]:
    return {
        "X-API-Key": api_key,
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }


def _error_message(response: httpx.Response) -> str:
    """Prefer the body's ``detail`` or ``message`` field, else the reason phrase."""
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase

    if isinstance(data, dict):
        message = data.get("detail") or data.get("message")
        if message:
            return str(message)
    return response.reason_phrase


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return int(seconds)


def raise_for_response(response: httpx.Response) -> None:
    """Map a non-success response to the matching error. Always raises.

    Raises:
        AuthenticationError: 401
        RateLimitError: 429
        QuotaExceededError: 403 with a quota message
        APIError: any other status
    """
    message = _error_message(response)
    status = response.status_code

    if status == 401:
        raise AuthenticationError(message)

    if status == 429:
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        raise RateLimitError(message, retry_after)

    if status == 400 and NO_STORE_MESSAGE in message:
        raise APIError(
            f"{NO_STORE_MESSAGE}. Please provide a store_id in your request.",
            400,
        )

    if status == 403 and "quota" in message.lower():
        raise QuotaExceededError(message)

    raise APIError(message, status)


def _is_retryable(error: APIError) -> bool:
    # Client-side errors will not change on retry
    if isinstance(error, (AuthenticationError, QuotaExceededError)):
        return False
    return error.status_code is None or error.status_code >= 500


def make_request_with_retry(
    method: str,
    url: str,
    api_key: str,
    timeout: float,
    max_retries: int = 3,
    json: dict[str, Any] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Any:
    """Make HTTP request with exponential backoff retry.

    4xx responses (including 429) are raised on the first attempt. Anything
    else (network errors, timeouts, 5xx, undecodable bodies) is retried.

    Args:
        method: HTTP method (GET, POST)
        url: Full request URL
        api_key: Value for the X-API-Key header
        timeout: Per-attempt timeout in seconds
        max_retries: Retries after the first attempt (max_retries + 1 attempts total)
        json: Optional JSON payload
        transport: Optional httpx transport override

    Returns:
        Decoded JSON body of the successful response

    Raises:
        APIError: If the API rejects the request or every attempt fails
    """
    headers = build_headers(api_key)
    last_error: Exception | None = None

    for attempt in range(max_retries + 1):
        try:
            with get_http_client(timeout, transport) as client:
                response = client.request(method, url, headers=headers, json=json)

            if not response.is_success:
                raise_for_response(response)

            return response.json()

        except APIError as e:
            if not _is_retryable(e):
                raise
            last_error = e

        except Exception as e:
            # Transport failures, timeouts, undecodable bodies and anything unexpected
            last_error = e

        if attempt < max_retries:
            time.sleep(backoff_delay(attempt))

    raise APIError(
        f"Request failed after {max_retries + 1} attempts: {last_error}"
    ) from last_error
