"""Signup, login, logout and profile endpoints."""

from flask import Blueprint, request

from budget_tracker.api.common import authenticate, components, ok, read_json_body
from budget_tracker.auth import Rejected, clear_session_cookie, set_session_cookie
from budget_tracker.models.auth import LoginRequest, ProfileUpdate, SignupRequest
from budget_tracker.validation import parse_payload


bp = Blueprint("auth", __name__, url_prefix="/auth")


def _issue_session(response, user_id):
    app = components()
    token = app.sessions.create_session(user_id)
    set_session_cookie(response, request, token, app.settings.session, app.settings.app)
    return response


@bp.route("/signup", methods=["POST"])
def signup():
    body = parse_payload(SignupRequest, read_json_body())
    user = components().credentials.signup(body)
    return _issue_session(ok(user, 201), user.id)


@bp.route("/login", methods=["POST"])
def login():
    body = parse_payload(LoginRequest, read_json_body())
    user = components().credentials.authenticate(body)
    return _issue_session(ok(user), user.id)


@bp.route("/logout", methods=["POST"])
def logout():
    app = components()
    app.sessions.revoke_session(app.gate.session_token(request))
    response = ok({"ok": True})
    clear_session_cookie(response, request, app.settings.session, app.settings.app)
    return response


@bp.route("/me", methods=["GET"])
def get_me():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    return ok(components().credentials.get_profile(auth.user))


@bp.route("/me", methods=["PUT"])
def update_me():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(ProfileUpdate, read_json_body())
    return ok(components().credentials.update_profile(auth.user.id, body))
