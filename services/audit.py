"""Append-only audit trail.

``record`` is called after a business change has been committed. It commits
its own row; if that fails the row is dropped and the failure logged, so the
user-facing action is never undone by its audit entry.
"""

import logging

from flask import has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def record(actor_id, action, table_name, record_id=None, old_values=None, new_values=None):
    ip_address = user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = request.user_agent.string or None

    entry = AuditLog(
        user_id=actor_id,
        action=action,
        table_name=table_name,
        record_id=record_id,
        old_values=old_values,
        new_values=new_values,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except (SQLAlchemyError, TypeError, ValueError):
        db.session.rollback()
        logger.exception("Audit log write failed: %s %s#%s by user %s", action, table_name, record_id, actor_id)
        return None
    return entry


def _page(query, page, limit):
    total = query.count()
    rows = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {"data": rows, "total": total}


def list_logs(page=1, limit=50):
    return _page(AuditLog.query, page, limit)


def list_by_user(user_id, page=1, limit=50):
    return _page(AuditLog.query.filter_by(user_id=user_id), page, limit)


def list_by_table(table_name, record_id=None):
    query = AuditLog.query.filter_by(table_name=table_name)
    if record_id is not None:
        query = query.filter_by(record_id=record_id)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).all()
