import logging
from smtplib import SMTPException

from flask_mail import Message
from sqlalchemy.exc import SQLAlchemyError

from extensions import db, mail
from models.notification import Notification

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "SUBMITTED": "diajukan",
    "PROCESSING": "sedang diproses",
    "APPROVED": "DISETUJUI",
    "REJECTED": "DITOLAK",
}


def notify_status_change(application):
    """In-app notice plus e-mail to the applicant. Failures are logged only."""
    applicant = application.applicant
    label = STATUS_LABELS.get(application.status, application.status)
    message = f"Permohonan {application.application_number} Anda telah {label}."
    if application.notes:
        message = f"{message} Catatan: {application.notes}"

    try:
        db.session.add(Notification(user_id=application.applicant_id, message=message[:255]))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not store notification for application %s", application.id)

    if not applicant or not applicant.email:
        return
    try:
        mail.send(Message(
            subject=f"Status permohonan {application.application_number}",
            recipients=[applicant.email],
            body=message,
        ))
    except (SMTPException, OSError):
        logger.exception("Could not e-mail applicant %s about application %s", applicant.id, application.id)


def list_for_user(user_id):
    return (
        Notification.query
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def mark_all_read(user_id):
    updated = Notification.query.filter_by(user_id=user_id, is_read=False).update({"is_read": True})
    db.session.commit()
    return updated
