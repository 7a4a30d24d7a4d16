from __future__ import annotations

import time

import httpx

from .constants import X_API_LOGGER as LOGGER

WAIT_SECONDS_EXTENSION = "bannerpost_wait_seconds"


def _seconds_until_reset(reset_header: str | None, *, now: float | None = None) -> int | None:
    if reset_header is None:
        return None
    try:
        reset_epoch = int(reset_header)
    except ValueError:
        return None

    current = time.time() if now is None else now
    return max(0, reset_epoch - int(current))


def _friendly_error_message(status_code: int, wait_seconds: int | None = None) -> str:
    if status_code == 401:
        return "Authentication failed. Your X account token may have expired."
    if status_code == 403:
        return "You don't have permission to perform this action."
    if status_code == 404:
        return "The requested resource was not found on X."
    if status_code == 429:
        if wait_seconds is None:
            return "Rate limit exceeded. Please try again later."
        return f"Rate limit exceeded. Please wait {wait_seconds} seconds."
    if status_code >= 500:
        return "X API is experiencing issues. Please try again later."
    return f"X API request failed with status {status_code}."


def extract_error_message(payload, status_code: int, wait_seconds: int | None = None) -> str:
    """Pick the most specific message out of a v1.1 or v2 X error body."""
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str) and detail:
            return detail
        errors = payload.get("errors")
        if isinstance(errors, list):
            for item in errors:
                if isinstance(item, dict):
                    message = item.get("message") or item.get("detail")
                    if isinstance(message, str) and message:
                        return message
        title = payload.get("title")
        if isinstance(title, str) and title:
            return title
    return _friendly_error_message(status_code, wait_seconds)


async def handle_rate_limits(response: httpx.Response) -> None:
    remaining = response.headers.get("x-rate-limit-remaining")
    reset = response.headers.get("x-rate-limit-reset")
    wait_seconds = _seconds_until_reset(reset)
    endpoint = str(response.request.url)

    if remaining is not None or reset is not None:
        LOGGER.debug(
            "Rate limit state endpoint=%s remaining=%s reset=%s wait=%s",
            endpoint,
            remaining,
            reset,
            wait_seconds,
        )

    if response.status_code == 429 or remaining == "0":
        if response.status_code == 429:
            response.extensions[WAIT_SECONDS_EXTENSION] = wait_seconds
        LOGGER.warning(
            "Rate limit warning endpoint=%s status=%s remaining=%s wait=%s",
            endpoint,
            response.status_code,
            remaining,
            wait_seconds,
        )


async def log_request(request: httpx.Request) -> None:
    LOGGER.info("X API request %s %s", request.method, request.url)


async def log_response(response: httpx.Response) -> None:
    LOGGER.info(
        "X API response %s %s -> %s",
        response.request.method,
        response.request.url,
        response.status_code,
    )
    if response.status_code >= 400:
        transaction_id = response.headers.get("x-transaction-id")
        if transaction_id:
            LOGGER.warning("X API x-transaction-id: %s", transaction_id)
        body = await response.aread()
        text = body.decode("utf-8", errors="replace")
        if len(text) > 1000:
            text = text[:1000] + "...<truncated>"
        LOGGER.warning("X API error body: %s", text)
