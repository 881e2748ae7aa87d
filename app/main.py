"""
Development Server for Budget Tracker

Serves the JSON API with Flask's built-in server. The browser UI talks to
these endpoints; production deployments run `create_app()` under a WSGI
server instead.

Usage:
    python app/main.py
"""

import sys

import structlog

from budget_tracker.api import create_app
from budget_tracker.audit import configure_logging
from budget_tracker.config import get_settings, validate_all_settings


logger = structlog.get_logger("budget_tracker.server")


def main() -> int:
    status = validate_all_settings()
    for group in ("database", "session", "app"):
        if not status.get(group, False):
            logger.error(
                "settings_invalid",
                group=group,
                error=status.get(f"{group}_error", "Not configured"),
            )
            return 1

    settings = get_settings()
    configure_logging(settings.app.log_level)

    app = create_app()
    logger.info(
        "server_starting",
        host=settings.app.host,
        port=settings.app.port,
        environment=settings.app.app_environment,
    )
    app.run(host=settings.app.host, port=settings.app.port, debug=settings.app.debug_mode)
    return 0


if __name__ == "__main__":
    sys.exit(main())
