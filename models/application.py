from extensions import db
from time_utils import utcnow

APPLICATION_TYPES = (
    "AKTA_KELAHIRAN",
    "AKTA_KEMATIAN",
    "PERUBAHAN_DATA",
    "PINDAH_DATANG",
    "KK_BARU",
    "KTP_BARU",
)
APPLICATION_STATUSES = ("DRAFT", "SUBMITTED", "PROCESSING", "APPROVED", "REJECTED")


class Application(db.Model):
    __tablename__ = "applications"
    __table_args__ = (
        db.Index("ix_applications_status", "status"),
        db.Index("ix_applications_applicant", "applicant_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    application_number = db.Column(db.String(50), nullable=False, unique=True)
    application_type = db.Column(db.Enum(*APPLICATION_TYPES, name="application_type"), nullable=False)

    # Relasi
    applicant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    population_id = db.Column(db.Integer, db.ForeignKey("population.id"), nullable=True)

    status = db.Column(
        db.Enum(*APPLICATION_STATUSES, name="application_status"),
        nullable=False,
        default="DRAFT"
    )
    # Isian sesuai jenis permohonan, disimpan apa adanya
    application_data = db.Column(db.JSON, nullable=False, default=dict)
    notes = db.Column(db.Text)

    processed_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    processed_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    version = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    # Relasi
    applicant = db.relationship("User", back_populates="applications", foreign_keys=[applicant_id])
    processor = db.relationship("User", foreign_keys=[processed_by])
    population = db.relationship("Population", back_populates="applications")

    def to_dict(self):
        return {
            "id": self.id,
            "application_number": self.application_number,
            "application_type": self.application_type,
            "applicant_id": self.applicant_id,
            "population_id": self.population_id,
            "status": self.status,
            "application_data": self.application_data,
            "notes": self.notes,
            "processed_by": self.processed_by,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "version": self.version,
        }
