from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from extensions import db
from time_utils import utcnow

USER_ROLES = ("SUPER_ADMIN", "ADMIN", "PETUGAS", "PENDUDUK")
# Peran yang boleh memproses data penduduk, dokumen dan permohonan
PRIVILEGED_ROLES = ("SUPER_ADMIN", "ADMIN", "PETUGAS")
ADMIN_ROLES = ("SUPER_ADMIN", "ADMIN")


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(
        db.Enum(*USER_ROLES, name="user_role"),
        nullable=False,
        default="PENDUDUK"
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    applications = db.relationship(
        "Application",
        back_populates="applicant",
        foreign_keys="Application.applicant_id",
        lazy=True
    )
    notifications = db.relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_privileged(self):
        return self.role in PRIVILEGED_ROLES

    def to_dict(self):
        # password_hash tidak pernah ikut keluar
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
