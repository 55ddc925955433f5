"""
Object storage gateway.

All outbound HTTP calls to the object store (attachments, module thumbnails,
test case images) go through this class. Direct `requests` calls in services
or blueprints are FORBIDDEN.

  - Auth: static service key sent as Bearer token + apikey header
  - Retry: max 2 retries on network errors and 5xx, backoff 1 s → 4 s
  - Timeout: STORAGE_TIMEOUT (default 30 s) per call
  - Structured GatewayResult returned to the service; never raises

Testability: pass a fake `session` to StorageGateway() in tests, or install a
gateway on the app with ``set_storage_gateway(app, gateway)``.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import quote

import requests
from flask import current_app

logger = logging.getLogger(__name__)

# ── Retry constants ────────────────────────────────────────────────────────
_RETRY_MAX = 2
_RETRY_BACKOFF_SECONDS = (1, 4)

# ── Default request timeout ────────────────────────────────────────────────
_DEFAULT_TIMEOUT = 30

_EXTENSION_KEY = "storage_gateway"


class GatewayResult:
    """Structured return value from gateway calls.

    Attributes:
        ok:             True if the call succeeded (HTTP 2xx + no exception).
        status_code:    HTTP status code (None if network-level failure).
        data:           Parsed JSON response body (dict or list), else None.
        error:          Human-readable error message or None.
        duration_ms:    Round-trip latency in milliseconds.
    """

    def __init__(
        self,
        ok: bool,
        status_code: int | None,
        data: dict | list | None,
        error: str | None,
        duration_ms: int,
    ) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def __repr__(self) -> str:
        return f"<GatewayResult ok={self.ok} status={self.status_code} error={self.error!r}>"


def send_with_retry(
    session: requests.Session,
    method: str,
    url: str,
    *,
    label: str,
    timeout: int,
    backoff: tuple = _RETRY_BACKOFF_SECONDS,
    **kwargs: Any,
) -> GatewayResult:
    """Execute one HTTP call with retries on network errors and 5xx.

    4xx responses are returned immediately; retrying cannot fix them.

    Returns:
        GatewayResult. Always returns, never raises. Callers check .ok.
    """
    last_error = "Unknown error"
    last_status: int | None = None
    attempts = min(_RETRY_MAX, len(backoff)) + 1

    for attempt in range(attempts):
        t0 = time.perf_counter()
        try:
            resp = session.request(method, url, timeout=timeout, **kwargs)
            duration_ms = int((time.perf_counter() - t0) * 1000)
            last_status = resp.status_code

            if resp.ok:
                try:
                    data = resp.json() if resp.content else {}
                except ValueError:
                    data = {}
                return GatewayResult(True, resp.status_code, data, None, duration_ms)

            last_error = f"HTTP {resp.status_code}: {resp.text[:500]}"
            if resp.status_code < 500:
                return GatewayResult(False, resp.status_code, None, last_error, duration_ms)
            logger.warning(
                "%s request failed attempt=%d/%d status=%d url=%s",
                label, attempt + 1, attempts, resp.status_code, url,
            )

        except requests.Timeout:
            last_error = f"Request timed out after {timeout}s"
            logger.warning("%s request timed out attempt=%d/%d url=%s",
                           label, attempt + 1, attempts, url)

        except requests.RequestException as exc:
            last_error = str(exc)[:500]
            logger.warning("%s network error attempt=%d/%d url=%s error=%s",
                           label, attempt + 1, attempts, url, last_error)

        # Sleep before retry (except after last attempt)
        if attempt < attempts - 1:
            time.sleep(backoff[attempt])

    return GatewayResult(False, last_status, None, last_error, 0)


class StorageGateway:
    """Object-store REST gateway (bucket/object API).

    Usage:
        gateway = get_storage_gateway()
        result = gateway.upload("test-attachments", path, data, "image/png")
        if result.ok:
            url = gateway.public_url("test-attachments", path)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        *,
        timeout: int = _DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        backoff: tuple = _RETRY_BACKOFF_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.backoff = backoff
        # Inject custom session for testing; create real one lazily otherwise.
        self._session: requests.Session | None = session

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _headers(self, extra: dict | None = None) -> dict:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
        }
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, url: str, **kwargs: Any) -> GatewayResult:
        return send_with_retry(
            self.session, method, url,
            label="Storage", timeout=self.timeout, backoff=self.backoff, **kwargs,
        )

    # ── Objects ──────────────────────────────────────────────────────────────

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> GatewayResult:
        """Store ``content`` at ``bucket/path``. Existing objects are not overwritten."""
        url = f"{self.base_url}/object/{bucket}/{quote(path)}"
        result = self._send(
            "POST", url,
            data=content,
            headers=self._headers({
                "Content-Type": content_type,
                "Cache-Control": "3600",
                "x-upsert": "false",
            }),
        )
        if result.ok:
            logger.info("Stored object bucket=%s path=%s bytes=%d", bucket, path, len(content))
        else:
            logger.error("Storage upload failed bucket=%s path=%s error=%s", bucket, path, result.error)
        return result

    def remove(self, bucket: str, paths: list[str]) -> GatewayResult:
        """Delete objects. Missing objects are not an error on the store side."""
        if not paths:
            return GatewayResult(True, None, [], None, 0)
        url = f"{self.base_url}/object/{bucket}"
        result = self._send(
            "DELETE", url,
            json={"prefixes": list(paths)},
            headers=self._headers({"Content-Type": "application/json"}),
        )
        if not result.ok:
            logger.warning("Storage remove failed bucket=%s paths=%s error=%s",
                           bucket, paths, result.error)
        return result

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{bucket}/{quote(path)}"

    # ── Buckets ──────────────────────────────────────────────────────────────

    def ensure_bucket(
        self,
        bucket: str,
        *,
        public: bool = True,
        file_size_limit: int | None = None,
        allowed_mime_types: list[str] | None = None,
    ) -> GatewayResult:
        """Create ``bucket`` unless it already exists."""
        existing = self._send("GET", f"{self.base_url}/bucket/{bucket}", headers=self._headers())
        if existing.ok:
            logger.info("Storage bucket %s already exists", bucket)
            return existing

        body: dict[str, Any] = {"id": bucket, "name": bucket, "public": public}
        if file_size_limit is not None:
            body["file_size_limit"] = file_size_limit
        if allowed_mime_types:
            body["allowed_mime_types"] = allowed_mime_types
        created = self._send(
            "POST", f"{self.base_url}/bucket",
            json=body,
            headers=self._headers({"Content-Type": "application/json"}),
        )
        if created.ok:
            logger.info("Created storage bucket %s", bucket)
        else:
            logger.error("Could not create storage bucket %s: %s", bucket, created.error)
        return created


def set_storage_gateway(app, gateway: StorageGateway) -> None:
    """Install a gateway on the app (factory default, or a fake in tests)."""
    app.extensions[_EXTENSION_KEY] = gateway


def get_storage_gateway() -> StorageGateway:
    """Return the current app's gateway, building it from config on first use."""
    gateway = current_app.extensions.get(_EXTENSION_KEY)
    if gateway is None:
        cfg = current_app.config
        gateway = StorageGateway(
            cfg["STORAGE_URL"],
            cfg.get("STORAGE_API_KEY", ""),
            timeout=cfg.get("STORAGE_TIMEOUT", _DEFAULT_TIMEOUT),
        )
        set_storage_gateway(current_app, gateway)
    return gateway
