"""
Shared fixtures.

``app`` builds a fresh application on an in-memory SQLite database with
temporary upload/export folders. Service tests use ``ctx`` (an app context
held for the whole test); HTTP tests use ``client`` without holding a
context, so every request resolves its own bearer token.
"""

from datetime import date

import pytest

from app import create_app
from extensions import db
from models.user import User
from schemas import PopulationCreate
from services import auth as auth_service
from services import population as population_service


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "UPLOAD_FOLDER_DOCUMENTS": str(tmp_path / "documents"),
        "EXPORT_FOLDER": str(tmp_path / "exports"),
        "MAIL_SUPPRESS_SEND": True,
        "LOG_LEVEL": "WARNING",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(role, username=None, password="secret123"):
    username = username or role.lower()
    user = User(username=username, email=f"{username}@example.com", role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def population_payload(**overrides):
    data = {
        "nik": "1234567890123456",
        "nama_lengkap": "John Doe",
        "tempat_lahir": "Bandung",
        "tanggal_lahir": date(1990, 5, 17),
        "jenis_kelamin": "LAKI_LAKI",
        "agama": "ISLAM",
        "status_perkawinan": "KAWIN",
        "pekerjaan": "Guru",
        "alamat": "Jl. Merdeka No. 10",
        "rt": "001",
        "rw": "002",
        "kelurahan": "Citarum",
        "kecamatan": "Bandung Wetan",
        "kabupaten": "Kota Bandung",
        "provinsi": "Jawa Barat",
        "kode_pos": "40115",
    }
    data.update(overrides)
    return data


@pytest.fixture
def users(ctx):
    return {
        "penduduk": make_user("PENDUDUK", "warga1"),
        "penduduk2": make_user("PENDUDUK", "warga2"),
        "petugas": make_user("PETUGAS"),
        "admin": make_user("ADMIN"),
        "super_admin": make_user("SUPER_ADMIN"),
    }


@pytest.fixture
def citizen(users):
    return population_service.create(PopulationCreate(**population_payload()), users["admin"].id)


@pytest.fixture
def login_as(app):
    """Create a user in a short-lived context; return (user_id, auth headers)."""
    def _login(role, username=None):
        with app.app_context():
            user = make_user(role, username)
            token = auth_service.issue_token(user)
            return user.id, {"Authorization": f"Bearer {token}"}
    return _login


@pytest.fixture
def seed_population(app):
    def _seed(**overrides):
        with app.app_context():
            admin = User.query.filter_by(role="SUPER_ADMIN").first() or make_user("SUPER_ADMIN", "seeder")
            population = population_service.create(PopulationCreate(**population_payload(**overrides)), admin.id)
            return population.id
    return _seed
