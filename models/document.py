from extensions import db
from time_utils import utcnow

DOCUMENT_TYPES = ("KTP", "KARTU_KELUARGA", "AKTA_KELAHIRAN", "AKTA_KEMATIAN")


class Document(db.Model):
    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)
    population_id = db.Column(db.Integer, db.ForeignKey("population.id"), nullable=False, index=True)

    document_type = db.Column(db.Enum(*DOCUMENT_TYPES, name="document_type"), nullable=False)
    document_number = db.Column(db.String(50))

    # File
    file_path = db.Column(db.Text, nullable=False)          # lokasi di blob store
    file_name = db.Column(db.String(255), nullable=False)   # nama asli dari pengunggah
    file_size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.String(100), nullable=False)

    # Validasi
    is_validated = db.Column(db.Boolean, nullable=False, default=False)
    validated_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    validated_at = db.Column(db.DateTime)

    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    version = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    population = db.relationship("Population", back_populates="documents")

    def to_dict(self):
        return {
            "id": self.id,
            "population_id": self.population_id,
            "document_type": self.document_type,
            "document_number": self.document_number,
            "file_path": self.file_path,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "is_validated": self.is_validated,
            "validated_by": self.validated_by,
            "validated_at": self.validated_at.isoformat() if self.validated_at else None,
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "version": self.version,
        }
