"""
Identity provider gateway.

Exchanges the authorization code handed to ``/auth/callback`` for session
tokens at the provider's token endpoint. Session management itself is the
provider's job; this app only keeps the returned tokens in the Flask session.

Testability: pass a fake `session` to IdentityGateway() in tests, or install
one with ``set_identity_gateway(app, gateway)``.
"""

from __future__ import annotations

import logging

import requests
from flask import current_app

from qa_checklist.integrations.storage_gateway import GatewayResult, send_with_retry

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10
_EXTENSION_KEY = "identity_gateway"


class IdentityGateway:
    """OAuth2 authorization-code exchange against the identity provider."""

    def __init__(
        self,
        token_url: str,
        client_id: str = "",
        client_secret: str = "",
        *,
        timeout: int = _DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._session: requests.Session | None = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def exchange_code(self, code: str, redirect_uri: str | None = None) -> GatewayResult:
        """Trade an authorization code for tokens.

        Returns:
            GatewayResult whose ``data`` holds ``access_token``,
            ``refresh_token`` and ``user`` on success. Never raises.
        """
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if redirect_uri:
            form["redirect_uri"] = redirect_uri

        # Codes are single-use: no retries.
        result = send_with_retry(
            self.session, "POST", self.token_url,
            label="Identity", timeout=self.timeout, backoff=(),
            data=form, headers={"Accept": "application/json"},
        )
        if result.ok and not (result.data or {}).get("access_token"):
            return GatewayResult(False, result.status_code, None,
                                 "Token response missing access_token", result.duration_ms)
        if not result.ok:
            logger.warning("Authorization code exchange failed: %s", result.error)
        return result


def set_identity_gateway(app, gateway: IdentityGateway) -> None:
    app.extensions[_EXTENSION_KEY] = gateway


def get_identity_gateway() -> IdentityGateway:
    gateway = current_app.extensions.get(_EXTENSION_KEY)
    if gateway is None:
        cfg = current_app.config
        gateway = IdentityGateway(
            cfg["IDP_TOKEN_URL"],
            cfg.get("IDP_CLIENT_ID", ""),
            cfg.get("IDP_CLIENT_SECRET", ""),
            timeout=cfg.get("IDP_TIMEOUT", _DEFAULT_TIMEOUT),
        )
        set_identity_gateway(current_app, gateway)
    return gateway
