"""
HTTP Backend — Client for a remote resolver service.

Forwards every PackageBackend call to a REST service that owns the
resolvable pool. Transient failures are retried according to a
RetryPolicy; a CircuitBreaker stops hammering a service that keeps
failing. Every failure surfaces as BackendError.
"""

import logging
import os
import time
from urllib.parse import quote

import httpx

from product_selector.backends.base import BackendError, BackendUnavailableError
from product_selector.core.resilience import CircuitBreaker, RetryPolicy

logger = logging.getLogger(__name__)


TOKEN_ENV = "PRODUCT_SELECTOR_TOKEN"


class HTTPBackend:
    """
    PackageBackend talking to a resolver service over HTTP.

    Endpoints:
        GET    /resolvables?name=&kind=&repository=
        POST   /resolvables/{kind}/{name}/install
        POST   /resolvables/{kind}/{name}/neutral
        GET    /products/{name}/license?lang=
        GET    /products/{name}/license/required
        GET    /products/{name}/license/confirmation
        POST   /products/{name}/license/confirmation
        DELETE /products/{name}/license/confirmation
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        retry: RetryPolicy | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token or os.environ.get(TOKEN_ENV)
        self.retry = retry or RetryPolicy()
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name=self.base_url)

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        self.client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    def __enter__(self) -> "HTTPBackend":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    # ──────────────────────────────────────────────
    # Resolvables
    # ──────────────────────────────────────────────

    def resolvable_properties(self, name: str, kind: str, repository: str) -> list[dict]:
        resp = self._request(
            "GET", "/resolvables", params={"name": name, "kind": kind, "repository": repository}
        )
        records = _json(resp)
        if not isinstance(records, list):
            raise BackendError(f"GET /resolvables returned {type(records).__name__}, expected a list")
        return records

    def resolvable_install(self, name: str, kind: str, repository: str) -> bool:
        resp = self._request(
            "POST", f"/resolvables/{_q(kind)}/{_q(name)}/install", json={"repository": repository}
        )
        return bool(_field(resp, "accepted"))

    def resolvable_neutral(self, name: str, kind: str, keep_related: bool) -> bool:
        resp = self._request(
            "POST", f"/resolvables/{_q(kind)}/{_q(name)}/neutral", json={"keep_related": keep_related}
        )
        return bool(_field(resp, "accepted"))

    # ──────────────────────────────────────────────
    # Licenses
    # ──────────────────────────────────────────────

    def license_to_confirm(self, name: str, lang: str) -> str | None:
        resp = self._request("GET", f"/products/{_q(name)}/license", params={"lang": lang}, allow_404=True)
        if resp.status_code == 404:
            return None
        return _field(resp, "license")

    def need_to_accept_license(self, name: str) -> bool:
        resp = self._request("GET", f"/products/{_q(name)}/license/required", allow_404=True)
        if resp.status_code == 404:
            return False
        return bool(_field(resp, "required"))

    def mark_license_confirmed(self, name: str) -> None:
        self._request("POST", f"/products/{_q(name)}/license/confirmation")

    def mark_license_not_confirmed(self, name: str) -> None:
        self._request("DELETE", f"/products/{_q(name)}/license/confirmation")

    def has_license_confirmed(self, name: str) -> bool:
        resp = self._request("GET", f"/products/{_q(name)}/license/confirmation", allow_404=True)
        if resp.status_code == 404:
            return False
        return bool(_field(resp, "confirmed"))

    # ──────────────────────────────────────────────
    # HTTP Layer
    # ──────────────────────────────────────────────

    def _request(
        self, method: str, path: str, attempt: int = 0, allow_404: bool = False, **kwargs
    ) -> httpx.Response:
        """Make an HTTP request, retrying transient failures."""
        if not self.circuit_breaker.allow():
            raise BackendUnavailableError(f"Resolver service {self.base_url} is unavailable")

        try:
            resp = self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            if self.retry.should_retry(attempt):
                delay = self.retry.delay(attempt)
                logger.warning(f"{method} {path} failed ({type(e).__name__}), retry {attempt + 1} after {delay:.1f}s")
                time.sleep(delay)
                return self._request(method, path, attempt + 1, allow_404, **kwargs)
            self.circuit_breaker.record_failure()
            raise BackendUnavailableError(f"{method} {path} failed after {attempt + 1} attempts: {e}") from e

        if self.retry.retryable_status(resp.status_code):
            if self.retry.should_retry(attempt):
                delay = self.retry.delay(attempt, resp.headers.get("Retry-After"))
                logger.warning(f"{method} {path} returned {resp.status_code}, retry {attempt + 1} after {delay:.1f}s")
                time.sleep(delay)
                return self._request(method, path, attempt + 1, allow_404, **kwargs)
            self.circuit_breaker.record_failure()
            raise BackendUnavailableError(
                f"{method} {path} still returned {resp.status_code} after {attempt + 1} attempts"
            )

        if resp.status_code >= 500:
            self.circuit_breaker.record_failure()
            raise BackendError(f"{method} {path} returned {resp.status_code}")

        self.circuit_breaker.record_success()

        if resp.status_code == 404 and allow_404:
            return resp
        if resp.is_error:
            raise BackendError(f"{method} {path} returned {resp.status_code}")

        logger.debug(f"{method} {path} -> {resp.status_code}")
        return resp


def _json(resp: httpx.Response):
    try:
        return resp.json()
    except ValueError as e:
        raise BackendError(f"{resp.request.method} {resp.request.url.path} returned invalid JSON") from e


def _field(resp: httpx.Response, key: str):
    data = _json(resp)
    if not isinstance(data, dict):
        raise BackendError(f"{resp.request.method} {resp.request.url.path} returned {type(data).__name__}, expected an object")
    return data.get(key)


def _q(segment: str) -> str:
    return quote(segment, safe="")
