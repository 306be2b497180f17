"""Async HTTP transport for the notes backend.

The transport handles the full request lifecycle:

1. Send the HTTP request with JSON headers.
2. On ``2xx`` -- return the parsed JSON body (``None`` when empty).
3. On a retryable status or network error -- back off and retry while
   attempts remain.
4. On any other transport failure -- raise :class:`NoteSyncTransportError`.
5. On any other non-``2xx`` -- raise :class:`NoteSyncRemoteRejection`.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from notesync.config import NoteSyncConfig
from notesync.errors import (
    NoteSyncDecodeError,
    NoteSyncRemoteRejection,
    NoteSyncTransportError,
)
from notesync.observability import NoopMetricsHook, get_logger

from .retries import _RETRYABLE_STATUSES, compute_backoff, should_retry

log = get_logger("notesync.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _raise_rejection(response: httpx.Response, method: str, path: str) -> None:
    """Raise :class:`NoteSyncRemoteRejection` for a non-2xx *response*."""
    status = response.status_code
    try:
        body: Any = response.json()
    except ValueError:
        body = response.text[:500]

    raise NoteSyncRemoteRejection(
        message=f"{method} {path} rejected with status {status}",
        context={"status_code": status, "method": method, "path": path, "body": body},
    )


def _decode_body(response: httpx.Response, method: str, path: str) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise NoteSyncDecodeError(
            message=f"{method} {path} returned a body that is not valid JSON",
            context={"method": method, "path": path, "reason": str(exc)},
            cause=exc,
        ) from exc


# ---------------------------------------------------------------------------
# Async transport
# ---------------------------------------------------------------------------

class AsyncNotesTransport:
    """Asynchronous HTTP transport with retries and metrics.

    Parameters
    ----------
    config:
        A :class:`NoteSyncConfig` instance controlling transport behaviour.
    """

    def __init__(self, config: NoteSyncConfig) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

        proxy: httpx.URL | str | None = config.http_proxy
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=proxy,
        )

    # -- public API --------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Execute an HTTP request against the notes backend.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
        path:
            Path relative to ``base_url`` (e.g. ``/notes/7``).
        **kwargs:
            Forwarded to :meth:`httpx.AsyncClient.request`; use ``json=``
            for request bodies.

        Returns
        -------
        Any
            Parsed JSON body, or ``None`` for an empty ``2xx`` response.

        Raises
        ------
        NoteSyncRemoteRejection
            On a non-2xx response once no retry remains.
        NoteSyncTransportError
            When no response could be obtained.
        NoteSyncDecodeError
            When a 2xx body is not valid JSON.
        """
        max_attempts = self._config.retry_max_attempts

        for attempt in range(max_attempts):
            t0 = time.monotonic()
            try:
                response = await self._client.request(method, path, **kwargs)
            except httpx.TransportError as exc:
                delay = self._handle_transport_exception(method, path, exc, attempt)
                await asyncio.sleep(delay)
                continue
            except httpx.DecodingError as exc:
                self._metrics.increment(
                    "notesync.requests_total",
                    tags={"method": method, "status": "error"},
                )
                raise NoteSyncDecodeError(
                    message=f"{method} {path} returned a body that could not be decoded",
                    context={"method": method, "path": path, "reason": str(exc)},
                    cause=exc,
                ) from exc
            except httpx.RequestError as exc:
                # Redirect loops and other non-transport failures; never retried.
                self._metrics.increment(
                    "notesync.requests_total",
                    tags={"method": method, "status": "error"},
                )
                raise NoteSyncTransportError(
                    message=f"Request failed on {method} {path}: {exc}",
                    context={"method": method, "path": path, "attempt": attempt + 1},
                    cause=exc,
                ) from exc
            elapsed_ms = (time.monotonic() - t0) * 1000

            status_tag = str(response.status_code)
            self._metrics.increment(
                "notesync.requests_total",
                tags={"method": method, "status": status_tag},
            )
            self._metrics.timing(
                "notesync.request_duration_ms",
                elapsed_ms,
                tags={"method": method, "status": status_tag},
            )
            log.debug(
                "Request complete",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "attempt": attempt + 1,
                        "elapsed_ms": round(elapsed_ms, 2),
                    }
                },
            )

            if 200 <= response.status_code < 300:
                return _decode_body(response, method, path)

            if response.status_code not in _RETRYABLE_STATUSES or not should_retry(
                response.status_code, None, attempt, max_attempts,
            ):
                _raise_rejection(response, method, path)

            retry_after: float | None = None
            reason = "server_error"
            if response.status_code == 429:
                retry_after = _parse_retry_after(response)
                reason = "rate_limited"

            delay = compute_backoff(
                attempt,
                base=self._config.retry_base_delay,
                maximum=self._config.retry_max_delay,
                jitter=self._config.retry_jitter,
                retry_after=retry_after,
            )
            self._metrics.increment(
                "notesync.retries_total",
                tags={"method": method, "reason": reason},
            )
            log.warning(
                "Retrying request",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "attempt": attempt + 1,
                        "delay": delay,
                    }
                },
            )
            await asyncio.sleep(delay)

        # Only reachable when max_attempts is 0, which the config rejects.
        raise NoteSyncTransportError(
            message=f"No attempt was made for {method} {path}",
            context={"method": method, "path": path, "attempt": 0},
        )

    async def close(self) -> None:
        """Close the underlying async HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotesTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # -- internals ---------------------------------------------------------

    def _handle_transport_exception(
        self,
        method: str,
        path: str,
        exc: httpx.TransportError,
        attempt: int,
    ) -> float:
        """Return the backoff delay if the request should be retried.

        Raises :class:`NoteSyncTransportError` otherwise.
        """
        max_attempts = self._config.retry_max_attempts
        self._metrics.increment(
            "notesync.requests_total",
            tags={"method": method, "status": "error"},
        )
        log.warning(
            "Request transport error",
            extra={
                "extra_fields": {
                    "op": "request",
                    "method": method,
                    "path": path,
                    "attempt": attempt + 1,
                    "error": str(exc),
                }
            },
        )
        if should_retry(None, exc, attempt, max_attempts):
            self._metrics.increment(
                "notesync.retries_total",
                tags={"method": method, "reason": "network_error"},
            )
            return compute_backoff(
                attempt,
                base=self._config.retry_base_delay,
                maximum=self._config.retry_max_delay,
                jitter=self._config.retry_jitter,
            )
        raise NoteSyncTransportError(
            message=f"Transport error on {method} {path}: {exc}",
            context={"method": method, "path": path, "attempt": attempt + 1},
            cause=exc,
        ) from exc
