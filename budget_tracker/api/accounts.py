"""Account endpoints. Accounts are addressed by code, not id."""

from flask import Blueprint

from budget_tracker.api.common import authenticate, components, ok, read_json_body
from budget_tracker.auth import Rejected
from budget_tracker.models.ledger import AccountCreate, AccountUpdate
from budget_tracker.validation import parse_payload


bp = Blueprint("accounts", __name__, url_prefix="/accounts")


@bp.route("", methods=["GET"])
def list_accounts():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    return ok(components().accounts.list_accounts(auth.user.id))


@bp.route("", methods=["POST"])
def create_account():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(AccountCreate, read_json_body())
    return ok(components().accounts.create_account(auth.user.id, body), 201)


@bp.route("/<code>", methods=["PUT"])
def update_account(code):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(AccountUpdate, read_json_body())
    return ok(components().accounts.update_account(auth.user.id, code, body))


@bp.route("/<code>", methods=["DELETE"])
def delete_account(code):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    deleted = components().accounts.delete_account(auth.user.id, code)
    return ok({"code": deleted})
