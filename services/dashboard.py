from sqlalchemy import func

from extensions import db
from models.application import APPLICATION_TYPES, Application
from models.document import Document
from models.population import Population
from services import workflow

RECENT_LIMIT = 5


def stats():
    # Hitung jumlah per status sekali jalan
    by_status = dict(
        db.session.query(Application.status, func.count(Application.id))
        .group_by(Application.status)
        .all()
    )
    recent = (
        Application.query
        .order_by(Application.created_at.desc(), Application.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return {
        "totalPopulation": Population.query.count(),
        "totalApplications": sum(by_status.values()),
        "pendingApplications": by_status.get(workflow.SUBMITTED, 0) + by_status.get(workflow.PROCESSING, 0),
        "approvedApplications": by_status.get(workflow.APPROVED, 0),
        "rejectedApplications": by_status.get(workflow.REJECTED, 0),
        "documentsUploaded": Document.query.count(),
        "documentsValidated": Document.query.filter_by(is_validated=True).count(),
        "recentApplications": [a.to_dict() for a in recent],
    }


def applications_by_type():
    counts = dict(
        db.session.query(Application.application_type, func.count(Application.id))
        .group_by(Application.application_type)
        .all()
    )
    return {t: counts.get(t, 0) for t in APPLICATION_TYPES}


def population_by_region():
    rows = (
        db.session.query(Population.kabupaten, func.count(Population.id))
        .group_by(Population.kabupaten)
        .order_by(Population.kabupaten)
        .all()
    )
    return {kabupaten: total for kabupaten, total in rows}
