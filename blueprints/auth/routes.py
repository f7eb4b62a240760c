from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from blueprints.helpers import bearer_token, json_body, parse, roles_required
from models.user import ADMIN_ROLES
from schemas import LoginRequest, RegisterRequest, UserActiveUpdate
from services import auth as auth_service

auth_bp = Blueprint("auth", __name__)


# Pendaftaran mandiri, selalu PENDUDUK
@auth_bp.route("/auth/register", methods=["POST"])
def register():
    data = parse(RegisterRequest, json_body())
    user = auth_service.register(data)
    return jsonify(user.to_dict()), 201


# Masuk
@auth_bp.route("/auth/login", methods=["POST"])
def login():
    data = parse(LoginRequest, json_body())
    result = auth_service.login(data.username, data.password)
    return jsonify({"user": result["user"].to_dict(), "token": result["token"]})


# Keluar
@auth_bp.route("/auth/logout", methods=["POST"])
@login_required
def logout():
    auth_service.logout(bearer_token())
    return jsonify({"success": True})


@auth_bp.route("/auth/me")
@login_required
def me():
    return jsonify(current_user.to_dict())


#-------------------------------------------------------
# Kelola akun
@auth_bp.route("/users", methods=["POST"])
@login_required
@roles_required("SUPER_ADMIN")
def create_user():
    data = parse(RegisterRequest, json_body())
    user = auth_service.create_user(data, current_user.id)
    return jsonify(user.to_dict()), 201


@auth_bp.route("/users/<int:user_id>/active", methods=["POST"])
@login_required
@roles_required(*ADMIN_ROLES)
def set_active(user_id):
    data = parse(UserActiveUpdate, json_body())
    user = auth_service.set_active(user_id, data.is_active, current_user.id)
    return jsonify(user.to_dict())
