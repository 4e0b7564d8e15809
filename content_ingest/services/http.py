from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import requests
from urllib3.exceptions import HTTPError as TransportError
from urllib3.exceptions import ReadTimeoutError

from content_ingest.errors import FetchFailure

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True)
class RetryPolicy:
    retries: int = 2
    timeout_ms: int = 8000
    backoff_ms: int = 800

    @property
    def attempts(self) -> int:
        return self.retries + 1

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def delay_seconds(self, attempt_index: int) -> float:
        # linear: backoff, 2*backoff, 3*backoff ...
        return self.backoff_ms * (attempt_index + 1) / 1000.0


def _read_body(response: requests.Response, url: str, deadline: float) -> None:
    """
    Drain a streamed body into ``response`` before ``deadline``.

    ``read1`` hands back whatever has arrived, so a server trickling bytes is
    cut off at the deadline instead of resetting the socket timeout forever.
    """
    raw = response.raw
    chunks: list[bytes] = []
    try:
        while True:
            if time.monotonic() > deadline:
                raise requests.Timeout(f"attempt deadline exceeded while reading {url}")
            chunk = raw.read1(READ_CHUNK_BYTES, decode_content=True)
            if not chunk:
                break
            chunks.append(chunk)
    except ReadTimeoutError as exc:
        raise requests.Timeout(exc) from exc
    except TransportError as exc:
        raise requests.ConnectionError(exc) from exc
    finally:
        response.close()

    response._content = b"".join(chunks)
    response._content_consumed = True


def _attempt(
    http: Any, method: str, url: str, policy: RetryPolicy, request_kwargs: dict[str, Any]
) -> requests.Response:
    deadline = time.monotonic() + policy.timeout_seconds
    response = http.request(method, url, timeout=policy.timeout_seconds, stream=True, **request_kwargs)
    _read_body(response, url, deadline)
    return response


def fetch_with_retry(
    url: str,
    *,
    method: str = "GET",
    policy: RetryPolicy | None = None,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
    **request_kwargs: Any,
) -> requests.Response:
    """
    Perform one HTTP request with bounded retries.

    Each attempt, body included, must finish within ``policy.timeout_ms``.
    Only transport failures (connection errors, timeouts) are retried. Any
    response that arrives, 5xx included, is returned as-is and the caller
    decides what the status means.
    """
    policy = policy or RetryPolicy()
    http = session or requests

    attempt = 0
    while True:
        try:
            return _attempt(http, method, url, policy, request_kwargs)
        except requests.RequestException as exc:
            attempt += 1
            if attempt >= policy.attempts:
                raise FetchFailure(url, policy.attempts, exc) from exc
            delay = policy.delay_seconds(attempt - 1)
            logger.warning(
                "fetch attempt %s/%s failed for %s: %s (retrying in %.1fs)",
                attempt, policy.attempts, url, exc, delay,
            )
            sleep(delay)
