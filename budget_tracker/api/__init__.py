"""
HTTP API for Budget Tracker

`create_app()` builds the Flask application: one blueprint per resource
family, JSON error handlers, and a correlation id bound into the log
context for every request.
"""

from typing import Optional

import structlog
from flask import Flask, g

from budget_tracker.api import accounts, auth, expenses, months, transfers
from budget_tracker.api.common import EXTENSION_KEY, ok
from budget_tracker.api.errors import register_error_handlers
from budget_tracker.audit import configure_logging, create_correlation_id
from budget_tracker.config import get_settings
from budget_tracker.orchestrator import AppComponents, create_app_components


CORRELATION_HEADER = "X-Correlation-ID"


def create_app(app_components: Optional[AppComponents] = None) -> Flask:
    """
    Application factory.

    Args:
        app_components: Pre-built components (tests pass their own).
            Built from environment settings when omitted.
    """
    if app_components is None:
        settings = get_settings()
        configure_logging(settings.app.log_level)
        app_components = create_app_components(settings)

    app = Flask(__name__)
    app.config["DEBUG"] = app_components.settings.app.debug_mode
    app.extensions[EXTENSION_KEY] = app_components

    for blueprint in (auth.bp, accounts.bp, months.bp, expenses.bp, transfers.bp):
        app.register_blueprint(blueprint)

    register_error_handlers(app)

    @app.before_request
    def bind_correlation_id():
        structlog.contextvars.clear_contextvars()
        g.correlation_id = str(create_correlation_id())
        structlog.contextvars.bind_contextvars(correlation_id=g.correlation_id)

    @app.after_request
    def echo_correlation_id(response):
        if "correlation_id" in g:
            response.headers[CORRELATION_HEADER] = g.correlation_id
        return response

    @app.route("/health", methods=["GET"])
    def health():
        return ok({"status": "ok"})

    return app


__all__ = ["create_app"]
