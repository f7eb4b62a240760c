import base64
import binascii

from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user

from blueprints.helpers import json_body, parse, require_roles
from exceptions import NotFound, ValidationFailed
from models.user import PRIVILEGED_ROLES
from schemas import DocumentUpload, DocumentValidate
from services import documents as document_service

documents_bp = Blueprint("documents", __name__)


@documents_bp.before_request
def restrict_to_staff():
    require_roles(PRIVILEGED_ROLES)


def _upload_payload():
    """Multipart ``file`` + form fields, or JSON with base64 ``file_data``."""
    file = request.files.get("file")
    if file is not None:
        content = file.read()
        payload = request.form.to_dict()
        payload.update(file_name=file.filename, file_size=len(content), mime_type=file.mimetype)
        return payload, content

    payload = json_body()
    encoded = payload.pop("file_data", None)
    if not encoded:
        raise ValidationFailed("Missing file: send multipart 'file' or JSON 'file_data'")
    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailed("file_data is not valid base64")
    # ukuran yang dicatat selalu ukuran isi sebenarnya
    payload["file_size"] = len(content)
    return payload, content


#-------------------------------------------------------
# Upload & validasi
@documents_bp.route("/documents", methods=["POST"])
def upload_document():
    payload, content = _upload_payload()
    data = parse(DocumentUpload, payload)
    document = document_service.upload(data, content, current_user.id)
    return jsonify(document.to_dict()), 201


@documents_bp.route("/documents/<int:document_id>/validate", methods=["POST"])
def validate_document(document_id):
    data = parse(DocumentValidate, json_body())
    document = document_service.validate(document_id, data.is_valid, current_user.id, notes=data.notes)
    return jsonify(document.to_dict())


#-------------------------------------------------------
# Lihat, hapus, unduh
@documents_bp.route("/population/<int:population_id>/documents")
def list_documents(population_id):
    rows = document_service.list_by_population(population_id)
    return jsonify([d.to_dict() for d in rows])


@documents_bp.route("/documents/<int:document_id>")
def get_document(document_id):
    document = document_service.get(document_id)
    if not document:
        raise NotFound("Document not found")
    return jsonify(document.to_dict())


@documents_bp.route("/documents/<int:document_id>", methods=["DELETE"])
def delete_document(document_id):
    document_service.delete(document_id, current_user.id)
    return jsonify({"success": True})


@documents_bp.route("/documents/<int:document_id>/download")
def download_document(document_id):
    located = document_service.download(document_id)
    if not located:
        raise NotFound("Document not found")
    return send_file(
        located["file_path"],
        mimetype=located["mime_type"],
        as_attachment=True,
        download_name=located["file_name"],
    )
