import hashlib
from extensions import db
from time_utils import utcnow


class RevokedToken(db.Model):
    """Bearer tokens revoked by logout, kept until they would have expired anyway."""

    __tablename__ = "revoked_tokens"

    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True)   # SHA-256 token
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @staticmethod
    def hash_token(token):
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    @classmethod
    def new_for(cls, token, expires_at):
        return cls(token_hash=cls.hash_token(token), expires_at=expires_at)

    @classmethod
    def is_revoked(cls, token):
        return cls.query.filter_by(token_hash=cls.hash_token(token)).first() is not None
