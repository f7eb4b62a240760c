from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from services import notifications

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.route("/notifications")
@login_required
def list_notifications():
    rows = notifications.list_for_user(current_user.id)
    return jsonify({
        "data": [n.to_dict() for n in rows],
        "unread": sum(1 for n in rows if not n.is_read),
    })


# Tandai semua sudah dibaca
@notifications_bp.route("/notifications/read", methods=["POST"])
@login_required
def mark_all_read():
    updated = notifications.mark_all_read(current_user.id)
    return jsonify({"updated": updated})
