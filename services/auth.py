"""
Identity: accounts, bearer tokens and revocation.

Tokens are ``itsdangerous`` signed payloads carrying the user id and role,
valid for ``TOKEN_MAX_AGE`` seconds. Logout stores the token's SHA-256 in
``revoked_tokens`` until the token would have expired on its own.
"""

import logging
import secrets
from datetime import timedelta

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.exc import IntegrityError

from extensions import db
from exceptions import AuthenticationFailed, DuplicateKey, Forbidden, NotFound
from models.revoked_token import RevokedToken
from models.user import ADMIN_ROLES, User
from services import audit
from time_utils import utcnow

logger = logging.getLogger(__name__)

TOKEN_SALT = "dukcapil-auth"
DEFAULT_TOKEN_MAX_AGE = 24 * 60 * 60


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def _max_age():
    return current_app.config.get("TOKEN_MAX_AGE", DEFAULT_TOKEN_MAX_AGE)


#-------------------------------------------------------
# Akun
def _new_user(data, role):
    if User.query.filter_by(username=data.username).first():
        raise DuplicateKey("Username already exists")
    if User.query.filter_by(email=data.email).first():
        raise DuplicateKey("Email already exists")

    user = User(username=data.username, email=data.email, role=role)
    user.set_password(data.password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateKey("Username or email already exists")
    return user


def register(data):
    """Self-registration; always creates a PENDUDUK account."""
    user = _new_user(data, "PENDUDUK")
    logger.info("User %s registered", user.username)
    audit.record(user.id, "REGISTER", "users", user.id, new_values=user.to_dict())
    return user


def create_user(data, actor_id):
    """Account with any role, created by a SUPER_ADMIN."""
    actor = db.session.get(User, actor_id)
    if not actor or actor.role != "SUPER_ADMIN":
        raise Forbidden("Only SUPER_ADMIN can create user accounts")
    user = _new_user(data, data.role)
    logger.info("User %s (%s) created by user %s", user.username, user.role, actor_id)
    audit.record(actor_id, "CREATE", "users", user.id, new_values=user.to_dict())
    return user


def set_active(user_id, is_active, actor_id):
    actor = db.session.get(User, actor_id)
    if not actor or actor.role not in ADMIN_ROLES:
        raise Forbidden("Insufficient permissions")
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    old = user.is_active
    user.is_active = is_active
    db.session.commit()

    logger.info("User %s is_active %s -> %s by user %s", user.id, old, is_active, actor_id)
    audit.record(actor_id, "SET_ACTIVE", "users", user.id,
                 old_values={"is_active": old}, new_values={"is_active": is_active})
    return user


#-------------------------------------------------------
# Token
def issue_token(user):
    # jti membuat dua login dalam detik yang sama tetap berbeda token
    return _serializer().dumps({"uid": user.id, "role": user.role, "jti": secrets.token_hex(8)})


def login(username, password):
    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        raise AuthenticationFailed("Invalid username or password")
    if not user.is_active:
        raise AuthenticationFailed("Account is deactivated")

    logger.info("User %s logged in", user.username)
    audit.record(user.id, "LOGIN", "users", user.id)
    return {"user": user, "token": issue_token(user)}


def logout(token):
    """Revoke ``token``. Returns False when it was already unusable."""
    try:
        payload, issued_at = _serializer().loads(token, max_age=_max_age(), return_timestamp=True)
    except BadSignature:
        return False
    if RevokedToken.is_revoked(token):
        return False

    expires_at = issued_at.replace(tzinfo=None) + timedelta(seconds=_max_age())
    db.session.add(RevokedToken.new_for(token, expires_at))
    try:
        db.session.commit()
    except IntegrityError:
        # logout ganda yang bersamaan
        db.session.rollback()
        return False

    audit.record(payload.get("uid"), "LOGOUT", "users", payload.get("uid"))
    return True


def resolve_actor(token):
    try:
        payload = _serializer().loads(token, max_age=_max_age())
    except SignatureExpired:
        logger.debug("Expired token presented")
        return None
    except BadSignature:
        return None
    if not isinstance(payload, dict) or "uid" not in payload:
        return None
    if RevokedToken.is_revoked(token):
        return None

    user = db.session.get(User, payload["uid"])
    if not user or not user.is_active:
        return None
    return user


def purge_revoked_tokens():
    removed = RevokedToken.query.filter(RevokedToken.expires_at < utcnow()).delete()
    db.session.commit()
    logger.info("Purged %s expired revoked token(s)", removed)
    return removed
