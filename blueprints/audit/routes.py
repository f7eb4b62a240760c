from flask import Blueprint, jsonify, request

from blueprints.helpers import page_response, parse, query_args, require_roles
from models.user import ADMIN_ROLES
from schemas import AuditQuery
from services import audit

audit_bp = Blueprint("audit", __name__)


# Jejak audit hanya untuk admin
@audit_bp.before_request
def restrict_to_admin():
    require_roles(ADMIN_ROLES)


@audit_bp.route("/audit")
def list_logs():
    query = parse(AuditQuery, query_args())
    return jsonify(page_response(audit.list_logs(query.page, query.limit)))


@audit_bp.route("/audit/users/<int:user_id>")
def list_by_user(user_id):
    query = parse(AuditQuery, query_args())
    return jsonify(page_response(audit.list_by_user(user_id, query.page, query.limit)))


@audit_bp.route("/audit/tables/<table_name>")
def list_by_table(table_name):
    record_id = request.args.get("record_id", type=int)
    return jsonify([entry.to_dict() for entry in audit.list_by_table(table_name, record_id)])
