"""
Identity callback blueprint.

Endpoints:
    GET  /auth/callback?code=...&next=...   exchange code, store tokens, redirect
    POST /auth/signout                      clear the session

Sign-in itself happens at the identity provider; this app only finishes
the authorization-code flow and keeps the returned tokens in the Flask
session.
"""

import logging
from urllib.parse import urlencode

from flask import Blueprint, current_app, jsonify, redirect, request, session

from qa_checklist.integrations.identity_gateway import get_identity_gateway

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

_SESSION_KEYS = ("access_token", "refresh_token", "user")


def _safe_next(value):
    """Only same-origin relative paths; anything else falls back to the default."""
    default = current_app.config.get("AUTH_REDIRECT_DEFAULT", "/projects")
    if not value or not value.startswith("/") or value.startswith("//") or "\\" in value:
        return default
    return value


def _login_redirect(error=None):
    if error:
        return redirect("/login?" + urlencode({"error": error}))
    return redirect("/login")


@auth_bp.route("/callback", methods=["GET"])
def callback():
    code = request.args.get("code", "").strip()
    target = _safe_next(request.args.get("next"))
    if not code:
        return _login_redirect()

    result = get_identity_gateway().exchange_code(code, redirect_uri=request.base_url)
    if not result.ok:
        return _login_redirect(result.error or "Authentication failed")

    tokens = result.data
    for key in _SESSION_KEYS:
        session.pop(key, None)
    session["access_token"] = tokens["access_token"]
    if tokens.get("refresh_token"):
        session["refresh_token"] = tokens["refresh_token"]
    if tokens.get("user"):
        session["user"] = tokens["user"]
    logger.info("User signed in", extra={"event_type": "auth_callback"})
    return redirect(target)


@auth_bp.route("/signout", methods=["POST"])
def signout():
    session.clear()
    return jsonify({"success": True, "message": "Signed out"}), 200
