"""Session cookie issuance and removal."""

from flask import Request, Response

from budget_tracker.config import AppSettings, SessionSettings


LOCAL_HOSTS = ("localhost", "127.0.0.1", "[::1]")


def should_use_secure_cookies(request: Request, app_settings: AppSettings) -> bool:
    """
    Secure cookies only in production, and never for a loopback host.

    Local development over plain HTTP would otherwise never get its
    session cookie back from the browser.
    """
    if not app_settings.is_production:
        return False

    host = (request.headers.get("X-Forwarded-Host") or request.host or "").strip().lower()
    return not host.startswith(LOCAL_HOSTS)


def set_session_cookie(
    response: Response,
    request: Request,
    token: str,
    session_settings: SessionSettings,
    app_settings: AppSettings,
) -> None:
    response.set_cookie(
        session_settings.cookie_name,
        token,
        max_age=session_settings.max_age_seconds,
        path="/",
        secure=should_use_secure_cookies(request, app_settings),
        httponly=True,
        samesite="Lax",
    )


def clear_session_cookie(
    response: Response,
    request: Request,
    session_settings: SessionSettings,
    app_settings: AppSettings,
) -> None:
    response.set_cookie(
        session_settings.cookie_name,
        "",
        max_age=0,
        path="/",
        secure=should_use_secure_cookies(request, app_settings),
        httponly=True,
        samesite="Lax",
    )
