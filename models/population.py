from extensions import db
from time_utils import utcnow

GENDERS = ("LAKI_LAKI", "PEREMPUAN")
RELIGIONS = ("ISLAM", "KRISTEN", "KATOLIK", "HINDU", "BUDDHA", "KONGHUCU")
MARITAL_STATUSES = ("BELUM_KAWIN", "KAWIN", "CERAI_HIDUP", "CERAI_MATI")


class Population(db.Model):
    __tablename__ = "population"
    __table_args__ = (
        db.Index("ix_population_nama_lengkap", "nama_lengkap"),
        db.Index("ix_population_kabupaten", "kabupaten"),
    )

    id = db.Column(db.Integer, primary_key=True)
    nik = db.Column(db.String(16), nullable=False, unique=True)   # Nomor Induk Kependudukan

    # Identitas
    nama_lengkap = db.Column(db.String(255), nullable=False)
    tempat_lahir = db.Column(db.String(100), nullable=False)
    tanggal_lahir = db.Column(db.Date, nullable=False)
    jenis_kelamin = db.Column(db.Enum(*GENDERS, name="gender"), nullable=False)
    agama = db.Column(db.Enum(*RELIGIONS, name="religion"), nullable=False)
    status_perkawinan = db.Column(db.Enum(*MARITAL_STATUSES, name="marital_status"), nullable=False)
    pekerjaan = db.Column(db.String(100), nullable=False)
    kewarganegaraan = db.Column(db.String(50), nullable=False, default="INDONESIA")

    # Alamat
    alamat = db.Column(db.Text, nullable=False)
    rt = db.Column(db.String(3), nullable=False)
    rw = db.Column(db.String(3), nullable=False)
    kelurahan = db.Column(db.String(100), nullable=False)
    kecamatan = db.Column(db.String(100), nullable=False)
    kabupaten = db.Column(db.String(100), nullable=False)
    provinsi = db.Column(db.String(100), nullable=False)
    kode_pos = db.Column(db.String(5), nullable=False)

    # Keluarga
    nomor_kk = db.Column(db.String(16))
    nama_ayah = db.Column(db.String(255))
    nama_ibu = db.Column(db.String(255))

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    documents = db.relationship("Document", back_populates="population", lazy=True)
    applications = db.relationship("Application", back_populates="population", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "nik": self.nik,
            "nama_lengkap": self.nama_lengkap,
            "tempat_lahir": self.tempat_lahir,
            "tanggal_lahir": self.tanggal_lahir.isoformat() if self.tanggal_lahir else None,
            "jenis_kelamin": self.jenis_kelamin,
            "agama": self.agama,
            "status_perkawinan": self.status_perkawinan,
            "pekerjaan": self.pekerjaan,
            "kewarganegaraan": self.kewarganegaraan,
            "alamat": self.alamat,
            "rt": self.rt,
            "rw": self.rw,
            "kelurahan": self.kelurahan,
            "kecamatan": self.kecamatan,
            "kabupaten": self.kabupaten,
            "provinsi": self.provinsi,
            "kode_pos": self.kode_pos,
            "nomor_kk": self.nomor_kk,
            "nama_ayah": self.nama_ayah,
            "nama_ibu": self.nama_ibu,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
