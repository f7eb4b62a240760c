import os

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from exceptions import Conflict, DependentRecordsExist, FileMissing, FileTooLarge, InvalidFileType, NotFound
from extensions import db
from models.audit_log import AuditLog
from models.document import Document
from schemas import DocumentUpload
from services import documents as document_service
from services import population as population_service
from storage import LocalBlobStore

PDF_BYTES = b"%PDF-1.4\n% test document\n"


def _upload(citizen, actor, content=PDF_BYTES, **overrides):
    data = {
        "population_id": citizen.id,
        "document_type": "KTP",
        "document_number": "KTP-001",
        "file_name": "ktp scan.pdf",
        "file_size": len(content),
        "mime_type": "application/pdf",
    }
    data.update(overrides)
    return document_service.upload(DocumentUpload(**data), content, actor.id)


def test_upload_stores_blob_and_metadata(app, users, citizen):
    document = _upload(citizen, users["petugas"])

    assert document.is_validated is False
    assert document.uploaded_by == users["petugas"].id
    assert document.file_name == "ktp scan.pdf"
    assert os.path.dirname(document.file_path) == app.config["UPLOAD_FOLDER_DOCUMENTS"]
    with open(document.file_path, "rb") as fh:
        assert fh.read() == PDF_BYTES

    stored_name = os.path.basename(document.file_path)
    assert stored_name.endswith(".pdf")
    assert f"_{citizen.id}_KTP_" in stored_name


def test_stored_names_are_unique(users, citizen):
    first = _upload(citizen, users["petugas"])
    second = _upload(citizen, users["petugas"])
    assert first.file_path != second.file_path


def test_upload_for_unknown_population(users, citizen):
    class Missing:
        id = 9999

    with pytest.raises(NotFound, match="Population record not found"):
        _upload(Missing, users["petugas"])


def test_text_plain_is_rejected(app, users, citizen):
    with pytest.raises(InvalidFileType):
        _upload(citizen, users["petugas"], content=b"hello", mime_type="text/plain", file_name="a.txt")
    assert Document.query.count() == 0
    assert os.listdir(app.config["UPLOAD_FOLDER_DOCUMENTS"]) == []


def test_declared_size_over_limit_is_rejected(users, citizen):
    with pytest.raises(FileTooLarge, match="5MB"):
        _upload(citizen, users["petugas"], file_size=5 * 1024 * 1024 + 1)


def test_actual_size_over_limit_is_rejected(users, citizen):
    content = b"0" * (5 * 1024 * 1024 + 1)
    with pytest.raises(FileTooLarge):
        _upload(citizen, users["petugas"], content=content, file_size=10)


def test_exactly_five_mib_is_accepted(users, citizen):
    content = b"0" * (5 * 1024 * 1024)
    document = _upload(citizen, users["petugas"], content=content, mime_type="image/png", file_name="kk.png")
    assert document.file_size == 5 * 1024 * 1024


def test_validate_sets_flag_and_stamp(users, citizen):
    document = _upload(citizen, users["petugas"])

    validated = document_service.validate(document.id, True, users["admin"].id, notes="sesuai asli")
    assert validated.is_validated is True
    assert validated.validated_by == users["admin"].id
    assert validated.validated_at is not None

    entry = AuditLog.query.filter_by(action="VALIDATE", record_id=document.id).one()
    assert entry.new_values["notes"] == "sesuai asli"


def test_validate_can_be_flipped_again(users, citizen):
    document = _upload(citizen, users["petugas"])
    document_service.validate(document.id, True, users["admin"].id)
    flipped = document_service.validate(document.id, False, users["petugas"].id)

    assert flipped.is_validated is False
    assert flipped.validated_by == users["petugas"].id
    assert flipped.version == 3


def test_validate_missing_document(users):
    with pytest.raises(NotFound, match="Document not found"):
        document_service.validate(404, True, users["admin"].id)


def test_list_by_population_in_upload_order(users, citizen):
    ids = [_upload(citizen, users["petugas"], document_type=t).id for t in ("KTP", "KARTU_KELUARGA")]
    assert [d.id for d in document_service.list_by_population(citizen.id)] == ids
    assert document_service.list_by_population(9999) == []


def test_delete_removes_blob_and_row(users, citizen):
    document = _upload(citizen, users["petugas"])
    path, document_id = document.file_path, document.id

    assert document_service.delete(document_id, users["admin"].id) is True
    assert document_service.get(document_id) is None
    assert not os.path.exists(path)


def test_delete_survives_missing_blob(users, citizen):
    document = _upload(citizen, users["petugas"])
    document_id = document.id
    os.remove(document.file_path)

    assert document_service.delete(document_id, users["admin"].id) is True
    assert document_service.get(document_id) is None


def test_delete_missing_document(users):
    with pytest.raises(NotFound, match="Document not found"):
        document_service.delete(404, users["admin"].id)


def test_download_locates_blob(users, citizen):
    document = _upload(citizen, users["petugas"])
    located = document_service.download(document.id)
    assert located == {
        "file_path": document.file_path,
        "file_name": "ktp scan.pdf",
        "mime_type": "application/pdf",
    }


def test_download_missing_metadata_returns_none(ctx):
    assert document_service.download(404) is None


def test_download_missing_blob(users, citizen):
    document = _upload(citizen, users["petugas"])
    os.remove(document.file_path)
    with pytest.raises(FileMissing):
        document_service.download(document.id)


def test_population_with_documents_cannot_be_deleted(users, citizen):
    _upload(citizen, users["petugas"])
    with pytest.raises(DependentRecordsExist, match="1 document"):
        population_service.delete(citizen.id, users["admin"].id)


def test_recorded_size_is_actual_content_length(users, citizen):
    content = b"%PDF" + b"0" * 4092
    document = _upload(citizen, users["petugas"], content=content, file_size=1)
    assert document.file_size == 4096


def test_failed_blob_write_leaves_no_metadata(users, citizen, monkeypatch):
    def failing_store(self, content, name):
        raise OSError("disk full")

    monkeypatch.setattr(LocalBlobStore, "store", failing_store)
    with pytest.raises(OSError):
        _upload(citizen, users["petugas"])

    assert Document.query.count() == 0
    assert AuditLog.query.filter_by(action="UPLOAD").count() == 0


def test_failed_commit_removes_stored_blob(app, users, citizen, monkeypatch):
    def failing_commit():
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(db.session, "commit", failing_commit)
    with pytest.raises(SQLAlchemyError):
        _upload(citizen, users["petugas"])
    monkeypatch.undo()

    assert os.listdir(app.config["UPLOAD_FOLDER_DOCUMENTS"]) == []
    assert Document.query.count() == 0


def test_delete_of_concurrently_modified_document(users, citizen):
    document = _upload(citizen, users["petugas"])
    assert document.version == 1
    # penulis lain menaikkan versi di belakang sesi ini
    db.session.execute(
        text("UPDATE documents SET version = version + 1 WHERE id = :id"), {"id": document.id}
    )

    with pytest.raises(Conflict):
        document_service.delete(document.id, users["admin"].id)

    assert os.path.exists(document.file_path)
    assert document_service.get(document.id) is not None
