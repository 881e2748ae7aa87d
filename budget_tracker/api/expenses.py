"""Outgoing (expense item) endpoints. Listing requires ?month_id=."""

from flask import Blueprint, request

from budget_tracker.api.common import authenticate, components, ok, read_json_body
from budget_tracker.auth import Rejected
from budget_tracker.models.ledger import OutgoingCreate, OutgoingUpdate
from budget_tracker.validation import parse_payload, parse_row_id, require_month_id


bp = Blueprint("expenses", __name__, url_prefix="/expenses")


@bp.route("", methods=["GET"])
def list_expenses():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    month_id = require_month_id(request.args.get("month_id"))
    return ok(components().outgoings.list_outgoings(auth.user.id, month_id))


@bp.route("", methods=["POST"])
def create_expense():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(OutgoingCreate, read_json_body())
    return ok(components().outgoings.create_outgoing(auth.user.id, body), 201)


@bp.route("/<outgoing_id>", methods=["PUT"])
def update_expense(outgoing_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(OutgoingUpdate, read_json_body())
    return ok(components().outgoings.update_outgoing(auth.user.id, parse_row_id(outgoing_id), body))


@bp.route("/<outgoing_id>", methods=["DELETE"])
def delete_expense(outgoing_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    deleted = components().outgoings.delete_outgoing(auth.user.id, parse_row_id(outgoing_id))
    return ok({"id": str(deleted)})
