import logging
import os
import time
import uuid

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.utils import secure_filename

from extensions import db
from exceptions import Conflict, FileMissing, FileTooLarge, InvalidFileType, NotFound
from models.document import Document
from models.population import Population
from services import audit
from storage import get_blob_store
from time_utils import utcnow

logger = logging.getLogger(__name__)

TABLE = "documents"
ALLOWED_MIME_TYPES = ("application/pdf", "image/jpeg", "image/jpg", "image/png")
MAX_DOCUMENT_SIZE = 5 * 1024 * 1024  # 5MB/file


def build_file_name(population_id, document_type, original_name):
    ext = os.path.splitext(secure_filename(original_name))[1].lower()
    return f"{int(time.time() * 1000)}_{population_id}_{document_type}_{uuid.uuid4().hex[:8]}{ext}"


def upload(data, content, actor_id):
    if not db.session.get(Population, data.population_id):
        raise NotFound("Population record not found")
    if data.mime_type not in ALLOWED_MIME_TYPES:
        raise InvalidFileType(f"Invalid file type: {data.mime_type}. Allowed: {', '.join(ALLOWED_MIME_TYPES)}")
    max_size = current_app.config.get("MAX_DOCUMENT_SIZE", MAX_DOCUMENT_SIZE)
    if data.file_size > max_size or len(content) > max_size:
        raise FileTooLarge(f"File size exceeds maximum limit of {max_size // (1024 * 1024)}MB")

    store = get_blob_store()
    # simpan file dulu; gagal di sini membatalkan seluruh unggahan
    path = store.store(content, build_file_name(data.population_id, data.document_type, data.file_name))

    document = Document(
        population_id=data.population_id,
        document_type=data.document_type,
        document_number=data.document_number,
        file_path=path,
        file_name=data.file_name,
        file_size=len(content),
        mime_type=data.mime_type,
        is_validated=False,
        uploaded_by=actor_id,
    )
    db.session.add(document)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        store.remove(path)
        raise

    logger.info("Document %s (%s) uploaded for population %s", document.id, document.document_type, document.population_id)
    audit.record(actor_id, "UPLOAD", TABLE, document.id, new_values=document.to_dict())
    return document


def validate(document_id, is_valid, actor_id, notes=None):
    document = db.session.get(Document, document_id)
    if not document:
        raise NotFound("Document not found")

    old_values = {"is_validated": document.is_validated, "validated_by": document.validated_by}
    document.is_validated = is_valid
    document.validated_by = actor_id
    document.validated_at = utcnow()
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise Conflict("Document was modified by another request")

    new_values = {"is_validated": is_valid, "validated_by": actor_id}
    if notes:
        new_values["notes"] = notes
    audit.record(actor_id, "VALIDATE", TABLE, document.id, old_values=old_values, new_values=new_values)
    return document


def list_by_population(population_id):
    return Document.query.filter_by(population_id=population_id).order_by(Document.id.asc()).all()


def get(document_id):
    return db.session.get(Document, document_id)


def delete(document_id, actor_id):
    document = db.session.get(Document, document_id)
    if not document:
        raise NotFound("Document not found")

    snapshot = document.to_dict()
    db.session.delete(document)
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise Conflict("Document was modified by another request")
    # metadata sudah terhapus; file menyusul, kegagalan hanya dicatat di log
    get_blob_store().remove(snapshot["file_path"])

    audit.record(actor_id, "DELETE", TABLE, document_id, old_values=snapshot)
    return True


def download(document_id):
    document = db.session.get(Document, document_id)
    if not document:
        return None
    if not get_blob_store().exists(document.file_path):
        raise FileMissing(f"File for document {document_id} is missing from storage")
    return {"file_path": document.file_path, "file_name": document.file_name, "mime_type": document.mime_type}
