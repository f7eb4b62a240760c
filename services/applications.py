"""
Application engine.

Owns the ``Application`` row and every status change on it. Each mutating
operation checks the actor, then the transition table in ``services.workflow``,
then writes and commits; the audit entry is recorded after the commit.
"""

import logging
import secrets
import string
import time

from sqlalchemy.orm.exc import StaleDataError

from extensions import db
from exceptions import Conflict, Forbidden, NotFound
from models.application import Application
from models.population import Population
from models.user import User
from services import audit, notifications, workflow
from time_utils import utcnow

logger = logging.getLogger(__name__)

TABLE = "applications"
NUMBER_ALPHABET = string.ascii_uppercase + string.digits

# Label dan isian yang diminta form untuk tiap jenis permohonan
APPLICATION_TYPE_INFO = {
    "AKTA_KELAHIRAN": ("Akta Kelahiran", ["nama_bayi", "tanggal_lahir", "tempat_lahir"]),
    "AKTA_KEMATIAN": ("Akta Kematian", ["tanggal_meninggal", "tempat_meninggal", "sebab_meninggal"]),
    "PERUBAHAN_DATA": ("Perubahan Data", ["jenis_perubahan", "data_lama", "data_baru"]),
    "PINDAH_DATANG": ("Pindah Datang", ["jenis_pindah", "alamat_asal", "alamat_tujuan"]),
    "KK_BARU": ("Kartu Keluarga Baru", ["alasan_kk_baru", "jumlah_anggota"]),
    "KTP_BARU": ("KTP Baru", ["alasan_ktp_baru"]),
}


def generate_application_number():
    while True:
        suffix = "".join(secrets.choice(NUMBER_ALPHABET) for _ in range(5))
        number = f"APP{int(time.time() * 1000)}{suffix}"
        if not Application.query.filter_by(application_number=number).first():
            return number


def application_types():
    return [
        {"value": value, "label": label, "fields": fields}
        for value, (label, fields) in APPLICATION_TYPE_INFO.items()
    ]


#-------------------------------------------------------
# Perubahan status
def create(data, applicant_id):
    if not db.session.get(User, applicant_id):
        raise NotFound("User not found")
    if data.population_id is not None and not db.session.get(Population, data.population_id):
        raise NotFound("Population record not found")

    application = Application(
        application_number=generate_application_number(),
        application_type=data.application_type,
        applicant_id=applicant_id,
        population_id=data.population_id,
        status=workflow.DRAFT,
        application_data=data.application_data,
        notes=data.notes,
    )
    db.session.add(application)
    db.session.commit()

    logger.info("Application %s (%s) created by user %s", application.application_number,
                application.application_type, applicant_id)
    audit.record(applicant_id, "CREATE", TABLE, application.id, new_values=application.to_dict())
    return application


def submit(application_id, actor_id=None):
    application = db.session.get(Application, application_id)
    if not application:
        raise NotFound("Application not found")
    if actor_id is not None and application.applicant_id != actor_id:
        raise NotFound("Application not found or access denied")

    workflow.check_transition(application.status, workflow.SUBMITTED, workflow.SUBMIT)
    old_status = application.status
    application.status = workflow.SUBMITTED
    _commit_transition()

    logger.info("Application %s submitted", application.application_number)
    audit.record(
        actor_id if actor_id is not None else application.applicant_id,
        "SUBMIT", TABLE, application.id,
        old_values={"status": old_status},
        new_values={"status": application.status},
    )
    return application


def update_status(application_id, new_status, actor_id, notes=None, expected_version=None):
    actor = db.session.get(User, actor_id)
    if not actor:
        raise NotFound("User not found")
    if not workflow.can_trigger(actor.role, workflow.UPDATE_STATUS):
        raise Forbidden("Insufficient permissions to update application status")

    application = db.session.get(Application, application_id)
    if not application:
        raise NotFound("Application not found")
    if expected_version is not None and application.version != expected_version:
        raise Conflict(
            f"Application was modified by another request (version {application.version}, expected {expected_version})"
        )
    workflow.check_transition(application.status, new_status, workflow.UPDATE_STATUS)

    old_values = {"status": application.status, "notes": application.notes}
    application.status = new_status
    if notes is not None:
        application.notes = notes
    # DRAFT tidak pernah jadi tujuan, jadi setiap perubahan di sini dicap petugasnya
    application.processed_by = actor_id
    application.processed_at = utcnow()
    _commit_transition()

    logger.info("Application %s moved %s -> %s by user %s", application.application_number,
                old_values["status"], new_status, actor_id)
    audit.record(
        actor_id, "UPDATE_STATUS", TABLE, application.id,
        old_values=old_values,
        new_values={"status": application.status, "notes": application.notes},
    )
    if new_status in workflow.TERMINAL:
        notifications.notify_status_change(application)
    return application


def cancel(application_id, actor_id):
    application = db.session.get(Application, application_id)
    # pemohon lain tidak boleh tahu apakah permohonan ada
    if not application or application.applicant_id != actor_id:
        raise NotFound("Application not found or access denied")
    workflow.check_cancellable(application.status)

    snapshot = application.to_dict()
    db.session.delete(application)
    _commit_transition()

    logger.info("Application %s cancelled by user %s", snapshot["application_number"], actor_id)
    audit.record(actor_id, "CANCEL", TABLE, application_id, old_values=snapshot)
    return True


def _commit_transition():
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise Conflict("Application was modified by another request")


#-------------------------------------------------------
# Query
def get(application_id):
    return db.session.get(Application, application_id)


def filtered(filters):
    query = Application.query

    if filters.status:
        query = query.filter(Application.status == filters.status)
    if filters.application_type:
        query = query.filter(Application.application_type == filters.application_type)
    if filters.applicant_id is not None:
        query = query.filter(Application.applicant_id == filters.applicant_id)

    return query.order_by(Application.created_at.desc(), Application.id.desc())


def list_applications(query):
    base = filtered(query)
    total = base.order_by(None).count()
    rows = base.offset((query.page - 1) * query.limit).limit(query.limit).all()
    return {"data": rows, "total": total}


def list_mine(applicant_id, query):
    return list_applications(query.model_copy(update={"applicant_id": applicant_id}))
