"""Month endpoints, including the month summary."""

from flask import Blueprint

from budget_tracker.api.common import authenticate, components, ok, read_json_body
from budget_tracker.auth import Rejected
from budget_tracker.models.ledger import MonthCreate, MonthUpdate
from budget_tracker.validation import parse_payload, parse_row_id


bp = Blueprint("months", __name__, url_prefix="/months")


@bp.route("", methods=["GET"])
def list_months():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    return ok(components().months.list_months(auth.user.id))


@bp.route("", methods=["POST"])
def create_month():
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(MonthCreate, read_json_body())
    return ok(components().months.create_month(auth.user.id, body), 201)


@bp.route("/<month_id>", methods=["PUT"])
def update_month(month_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    body = parse_payload(MonthUpdate, read_json_body())
    return ok(components().months.update_month(auth.user.id, parse_row_id(month_id), body))


@bp.route("/<month_id>", methods=["DELETE"])
def delete_month(month_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    deleted = components().months.delete_month(auth.user.id, parse_row_id(month_id))
    return ok({"id": str(deleted)})


@bp.route("/<month_id>/summary", methods=["GET"])
def month_summary(month_id):
    auth = authenticate()
    if isinstance(auth, Rejected):
        return auth.to_response()
    return ok(components().months.summarize(auth.user.id, parse_row_id(month_id)))
