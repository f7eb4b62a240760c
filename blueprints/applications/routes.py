from flask import Blueprint, jsonify, send_file
from flask_login import current_user, login_required

from blueprints.helpers import json_body, page_response, parse, query_args, roles_required
from exceptions import NotFound
from models.user import PRIVILEGED_ROLES
from schemas import ApplicationCreate, ApplicationQuery, ApplicationStatusUpdate
from services import applications as application_service
from services import reports

applications_bp = Blueprint("applications", __name__)

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _visible_application(application_id):
    # Pemohon hanya melihat miliknya sendiri; petugas melihat semuanya
    application = application_service.get(application_id)
    if not application or (not current_user.is_privileged and application.applicant_id != current_user.id):
        raise NotFound("Application not found or access denied")
    return application


@applications_bp.route("/applications/types")
@login_required
def application_types():
    return jsonify(application_service.application_types())


@applications_bp.route("/applications", methods=["POST"])
@login_required
def create_application():
    data = parse(ApplicationCreate, json_body())
    application = application_service.create(data, current_user.id)
    return jsonify(application.to_dict()), 201


@applications_bp.route("/applications/<int:application_id>/submit", methods=["POST"])
@login_required
def submit_application(application_id):
    application = application_service.submit(application_id, actor_id=current_user.id)
    return jsonify(application.to_dict())


@applications_bp.route("/applications/<int:application_id>/status", methods=["POST"])
@login_required
@roles_required(*PRIVILEGED_ROLES)
def update_application_status(application_id):
    data = parse(ApplicationStatusUpdate, json_body())
    application = application_service.update_status(
        application_id, data.status, current_user.id,
        notes=data.notes, expected_version=data.version,
    )
    return jsonify(application.to_dict())


@applications_bp.route("/applications/<int:application_id>", methods=["DELETE"])
@login_required
def cancel_application(application_id):
    success = application_service.cancel(application_id, current_user.id)
    return jsonify({"success": success})


#-------------------------------------------------------
# Daftar & detail
@applications_bp.route("/applications/<int:application_id>")
@login_required
def get_application(application_id):
    return jsonify(_visible_application(application_id).to_dict())


@applications_bp.route("/applications")
@login_required
@roles_required(*PRIVILEGED_ROLES)
def list_applications():
    query = parse(ApplicationQuery, query_args())
    return jsonify(page_response(application_service.list_applications(query)))


@applications_bp.route("/applications/mine")
@login_required
def my_applications():
    query = parse(ApplicationQuery, query_args())
    return jsonify(page_response(application_service.list_mine(current_user.id, query)))


# Cetak formulir permohonan (docx)
@applications_bp.route("/applications/<int:application_id>/export")
@login_required
def export_application(application_id):
    application = _visible_application(application_id)
    buffer = reports.application_form_docx(application)
    return send_file(
        buffer,
        as_attachment=True,
        download_name=f"Permohonan_{application.application_number}.docx",
        mimetype=DOCX_MIMETYPE,
    )
