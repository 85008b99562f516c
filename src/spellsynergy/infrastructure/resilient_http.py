"""Retrying JSON GETs for spell-library providers, with a per-host circuit breaker.

A host that keeps timing out or returning retryable statuses is skipped until its
circuit reset window passes, so a dead spell API fails fast instead of stalling
every training run.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any

import httpx


_RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})
_RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)

_logger = logging.getLogger(__name__)


class CircuitOpenError(RuntimeError):
    def __init__(self, host: str, resource: str, reopens_at: float) -> None:
        self.host = host
        self.resource = resource
        self.reopens_at = reopens_at
        super().__init__(f"Spell source {host} is paused after repeated failures ({resource}); retry after {int(reopens_at)}")


@dataclass(frozen=True)
class CircuitSettings:
    enabled: bool = True
    failure_threshold: int = 3
    reset_seconds: float = 120.0

    @classmethod
    def from_env(cls) -> "CircuitSettings":
        raw_enabled = os.getenv("SPELLSYNERGY_HTTP_CIRCUIT_BREAKER_ENABLED", "1")
        return cls(
            enabled=str(raw_enabled).strip().lower() in {"1", "true", "yes"},
            failure_threshold=max(1, int(os.getenv("SPELLSYNERGY_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3"))),
            reset_seconds=max(0.0, float(os.getenv("SPELLSYNERGY_HTTP_CIRCUIT_RESET_SECONDS", "120"))),
        )


class _HostCircuit:
    def __init__(self) -> None:
        self.failures = 0
        self.open_until = 0.0

    def check(self, host: str, resource: str, now: float) -> None:
        if self.open_until > now:
            raise CircuitOpenError(host, resource, self.open_until)
        if self.open_until > 0:
            # half-open: allow one fresh attempt
            self.failures = 0
            self.open_until = 0.0

    def record_failure(self, settings: CircuitSettings, host: str, now: float) -> None:
        self.failures += 1
        if self.failures >= settings.failure_threshold:
            self.open_until = now + settings.reset_seconds
            _logger.warning("Spell source circuit opened", extra={"host": host, "failures": self.failures})


_CIRCUITS: dict[str, _HostCircuit] = {}


def reset_circuit_breakers() -> None:
    _CIRCUITS.clear()


def _host(client: httpx.Client) -> str:
    return str(getattr(client, "base_url", "") or "unknown")


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, _RETRYABLE_EXCEPTIONS):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return False


def get_json_with_retry(
    client: httpx.Client,
    path: str,
    *,
    params: dict[str, Any] | None = None,
    retries: int = 0,
    backoff_seconds: float = 0.2,
    resource: str = "spell listing",
) -> dict[str, Any]:
    """GET ``path`` and decode the JSON body; a bare list body is wrapped as ``{"results": [...]}``."""
    settings = CircuitSettings.from_env()
    host = _host(client)
    circuit = _CIRCUITS.setdefault(host, _HostCircuit()) if settings.enabled else None
    attempts = max(0, int(retries)) + 1

    for attempt in range(attempts):
        if circuit is not None:
            circuit.check(host, resource, time.time())
        try:
            response = client.get(path, params=params)
            if response.status_code in _RETRYABLE_STATUS_CODES:
                raise httpx.HTTPStatusError(
                    f"Retryable HTTP status {response.status_code} for {resource}",
                    request=response.request,
                    response=response,
                )
            response.raise_for_status()
            payload = response.json()
        except Exception as exc:
            retryable = _is_retryable(exc)
            if retryable and circuit is not None:
                circuit.record_failure(settings, host, time.time())
            if not retryable or attempt >= attempts - 1:
                raise
            _logger.debug(
                "Retrying spell source request",
                extra={"host": host, "resource": resource, "path": path, "attempt": attempt + 1},
            )
            delay = max(0.0, backoff_seconds) * (2**attempt)
            if delay > 0:
                time.sleep(delay)
            continue

        if circuit is not None:
            _CIRCUITS.pop(host, None)
        return payload if isinstance(payload, dict) else {"results": payload}
    return {}
