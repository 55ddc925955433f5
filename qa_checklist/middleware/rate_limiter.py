"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter.
The Limiter instance is created in qa_checklist/__init__.py with no default
limits; this module applies limits per route category.

Usage:
    from qa_checklist.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

# Blueprints whose traffic is mostly mutations (uploads, result updates)
_WRITE_HEAVY = ("checklists", "attachments", "auth")
# Blueprints that mostly serve lists to the SPA
_READ_HEAVY = ("projects", "modules", "testers")


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Write-heavy blueprints:  60/minute
        - Read-heavy blueprints:   200/minute
        - Health check:            exempt

    Rate limiting is disabled in testing mode.
    """

    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name in _WRITE_HEAVY:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    for bp_name in _READ_HEAVY:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured: write %s, read %s", WRITE_LIMIT, READ_LIMIT)
