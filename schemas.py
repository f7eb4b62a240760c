"""
Input schemas for the registry API.

Each Pydantic model describes one procedure's payload. The boundary validates
requests against these models before anything reaches ``services``; the
services themselves accept the validated models and trust their shape
(presence, length, closed vocabularies).
"""

from datetime import date
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

UserRole = Literal["SUPER_ADMIN", "ADMIN", "PETUGAS", "PENDUDUK"]
Gender = Literal["LAKI_LAKI", "PEREMPUAN"]
Religion = Literal["ISLAM", "KRISTEN", "KATOLIK", "HINDU", "BUDDHA", "KONGHUCU"]
MaritalStatus = Literal["BELUM_KAWIN", "KAWIN", "CERAI_HIDUP", "CERAI_MATI"]
DocumentType = Literal["KTP", "KARTU_KELUARGA", "AKTA_KELAHIRAN", "AKTA_KEMATIAN"]
ApplicationType = Literal[
    "AKTA_KELAHIRAN", "AKTA_KEMATIAN", "PERUBAHAN_DATA", "PINDAH_DATANG", "KK_BARU", "KTP_BARU"
]
ApplicationStatus = Literal["DRAFT", "SUBMITTED", "PROCESSING", "APPROVED", "REJECTED"]

NIK_PATTERN = r"^\d{16}$"


# -----------------------------
# Auth / Users
# -----------------------------
class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = "PENDUDUK"


class LoginRequest(BaseModel):
    username: str
    password: str


class UserActiveUpdate(BaseModel):
    is_active: bool


# -----------------------------
# Kependudukan
# -----------------------------
class PopulationCreate(BaseModel):
    nik: str = Field(..., description="Nomor Induk Kependudukan", pattern=NIK_PATTERN)
    nama_lengkap: str = Field(..., min_length=2, max_length=255)
    tempat_lahir: str = Field(..., min_length=2, max_length=100)
    tanggal_lahir: date
    jenis_kelamin: Gender
    agama: Religion
    status_perkawinan: MaritalStatus
    pekerjaan: str = Field(..., max_length=100)
    kewarganegaraan: str = Field("INDONESIA", max_length=50)
    alamat: str = Field(..., max_length=500)
    rt: str = Field(..., max_length=3)
    rw: str = Field(..., max_length=3)
    kelurahan: str = Field(..., max_length=100)
    kecamatan: str = Field(..., max_length=100)
    kabupaten: str = Field(..., max_length=100)
    provinsi: str = Field(..., max_length=100)
    kode_pos: str = Field(..., max_length=5)
    nomor_kk: Optional[str] = Field(None, description="Nomor Kartu Keluarga", pattern=NIK_PATTERN)
    nama_ayah: Optional[str] = Field(None, max_length=255)
    nama_ibu: Optional[str] = Field(None, max_length=255)


class PopulationUpdate(BaseModel):
    # NIK tidak bisa diubah setelah data dibuat
    model_config = ConfigDict(extra="forbid")

    nama_lengkap: Optional[str] = Field(None, min_length=2, max_length=255)
    tempat_lahir: Optional[str] = Field(None, min_length=2, max_length=100)
    tanggal_lahir: Optional[date] = None
    jenis_kelamin: Optional[Gender] = None
    agama: Optional[Religion] = None
    status_perkawinan: Optional[MaritalStatus] = None
    pekerjaan: Optional[str] = Field(None, max_length=100)
    kewarganegaraan: Optional[str] = Field(None, max_length=50)
    alamat: Optional[str] = Field(None, max_length=500)
    rt: Optional[str] = Field(None, max_length=3)
    rw: Optional[str] = Field(None, max_length=3)
    kelurahan: Optional[str] = Field(None, max_length=100)
    kecamatan: Optional[str] = Field(None, max_length=100)
    kabupaten: Optional[str] = Field(None, max_length=100)
    provinsi: Optional[str] = Field(None, max_length=100)
    kode_pos: Optional[str] = Field(None, max_length=5)
    nomor_kk: Optional[str] = Field(None, pattern=NIK_PATTERN)
    nama_ayah: Optional[str] = Field(None, max_length=255)
    nama_ibu: Optional[str] = Field(None, max_length=255)

    @field_validator(
        "nama_lengkap", "tempat_lahir", "tanggal_lahir", "jenis_kelamin", "agama",
        "status_perkawinan", "pekerjaan", "kewarganegaraan", "alamat", "rt", "rw",
        "kelurahan", "kecamatan", "kabupaten", "provinsi", "kode_pos",
    )
    @classmethod
    def not_null(cls, v):
        # kolom wajib boleh dilewati, tapi tidak boleh dikosongkan
        if v is None:
            raise ValueError("field cannot be null")
        return v


class Pagination(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class PopulationFilters(BaseModel):
    search: Optional[str] = None
    kelurahan: Optional[str] = None
    kecamatan: Optional[str] = None
    kabupaten: Optional[str] = None


class PopulationQuery(Pagination, PopulationFilters):
    pass


# -----------------------------
# Dokumen
# -----------------------------
class DocumentUpload(BaseModel):
    population_id: int
    document_type: DocumentType
    document_number: Optional[str] = Field(None, max_length=50)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: int = Field(..., gt=0)
    mime_type: str


class DocumentValidate(BaseModel):
    is_valid: bool
    notes: Optional[str] = None


# -----------------------------
# Permohonan
# -----------------------------
class ApplicationCreate(BaseModel):
    application_type: ApplicationType
    population_id: Optional[int] = None
    application_data: Dict[str, Any] = Field(..., description="Isian tambahan sesuai jenis permohonan")
    notes: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None
    version: Optional[int] = Field(None, description="Versi yang terakhir dibaca klien")


class ApplicationFilters(BaseModel):
    status: Optional[ApplicationStatus] = None
    application_type: Optional[ApplicationType] = None
    applicant_id: Optional[int] = None


class ApplicationQuery(Pagination, ApplicationFilters):
    pass


# -----------------------------
# Audit & laporan
# -----------------------------
class AuditQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=200)


class ReportRequest(BaseModel):
    format: Literal["pdf", "excel"]
    filters: Optional[Dict[str, Any]] = None
