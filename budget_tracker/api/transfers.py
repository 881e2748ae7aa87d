"""Transfer endpoints. Listing requires ?month_id=."""

from flask import Blueprint, request

from budget_tracker.api.common import authenticate, components, ok, read_json_body
from budget_tracker.auth import Rejected
from budget_tracker.models.ledger import TransferCreate, TransferUpdate
from budget_tracker.validation import parse_payload, parse_row_id, require_month_id


bp = Blueprint("transfers", __name__, url_prefix="/transfers")


@bp.route("", methods=["GET"])
def list_transfers():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    month_id = require_month_id(request.args.get("month_id"))
    return ok(components().transfers.list_transfers(auth.user.id, month_id))


@bp.route("", methods=["POST"])
def create_transfer():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(TransferCreate, read_json_body())
    return ok(components().transfers.create_transfer(auth.user.id, body), 201)


@bp.route("/<transfer_id>", methods=["PUT"])
def update_transfer(transfer_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(TransferUpdate, read_json_body())
    return ok(components().transfers.update_transfer(auth.user.id, parse_row_id(transfer_id), body))


@bp.route("/<transfer_id>", methods=["DELETE"])
def delete_transfer(transfer_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    deleted = components().transfers.delete_transfer(auth.user.id, parse_row_id(transfer_id))
    return ok({"id": str(deleted)})
