"""Bounded-time HTTP probe for webhook connectivity checks."""

from __future__ import annotations

import logging
import time

import httpx

from projaudit.models import ConnectivityResult

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 10.0


def probe_webhook(
    url: str,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    method: str = "HEAD",
    transport: httpx.BaseTransport | None = None,
) -> ConnectivityResult:
    """Probe a webhook endpoint and report whether it answered.

    Any HTTP response below 500 counts as connected: the endpoint is reachable
    even if it rejects the probe request itself.

    Args:
        url: Endpoint to probe.
        timeout: Seconds allowed for the probe. HTTPX applies it to each
            phase (connect, write, read, pool); a response that completes
            later than this overall is also reported as a timeout.
        method: HTTP method used for the probe.
        transport: Optional HTTPX transport, for tests.

    Returns:
        ConnectivityResult with the elapsed time in milliseconds when the
        endpoint answered, or error_message "timeout" when it did not answer
        in time.
    """
    started = time.monotonic()
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.request(method, url)
    except httpx.TimeoutException:
        logger.warning("Webhook probe to %s timed out after %.1fs", url, timeout)
        return ConnectivityResult(is_connected=False, response_time=None, error_message="timeout")
    except httpx.HTTPError as e:
        logger.warning("Webhook probe to %s failed: %s", url, e)
        return ConnectivityResult(is_connected=False, response_time=None, error_message=str(e))

    elapsed = time.monotonic() - started
    if elapsed > timeout:
        logger.warning(
            "Webhook probe to %s answered after %.1fs, over %.1fs", url, elapsed, timeout
        )
        return ConnectivityResult(is_connected=False, response_time=None, error_message="timeout")

    elapsed_ms = int(elapsed * 1000)
    if response.status_code >= 500:
        return ConnectivityResult(
            is_connected=False,
            response_time=elapsed_ms,
            error_message=f"HTTP {response.status_code}",
        )
    return ConnectivityResult(is_connected=True, response_time=elapsed_ms, error_message=None)
