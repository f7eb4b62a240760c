import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from extensions import db, login_manager, mail, migrate
from exceptions import AuthenticationFailed, FileTooLarge, RegistryError

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def create_app(test_config=None):
    load_dotenv()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "secret_key")
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv("DATABASE_URL", "sqlite:///dukcapil.db")
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Penyimpanan file dokumen & hasil ekspor laporan
    app.config["UPLOAD_FOLDER_DOCUMENTS"] = os.getenv(
        "UPLOAD_FOLDER_DOCUMENTS", os.path.join(BASE_DIR, "static", "uploads", "documents")
    )
    app.config["EXPORT_FOLDER"] = os.getenv("EXPORT_FOLDER", os.path.join(BASE_DIR, "static", "exports"))
    app.config["MAX_DOCUMENT_SIZE"] = 5 * 1024 * 1024  # 5MB/file
    # Batas body HTTP lebih longgar untuk overhead multipart/base64
    app.config["MAX_CONTENT_LENGTH"] = 8 * 1024 * 1024
    app.config["TOKEN_MAX_AGE"] = int(os.getenv("TOKEN_MAX_AGE", 24 * 60 * 60))
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")

    # Konfigurasi Flask-Mail
    app.config.update(
        MAIL_SERVER=os.getenv("MAIL_SERVER", "smtp.gmail.com"),
        MAIL_PORT=int(os.getenv("MAIL_PORT", 587)),
        MAIL_USE_TLS=True,
        MAIL_USERNAME=os.getenv("MAIL_USERNAME"),
        MAIL_PASSWORD=os.getenv("MAIL_PASSWORD"),
        MAIL_DEFAULT_SENDER=os.getenv("MAIL_DEFAULT_SENDER", os.getenv("MAIL_USERNAME") or "noreply@dukcapil.local"),
    )

    if test_config:
        app.config.update(test_config)

    os.makedirs(app.config["UPLOAD_FOLDER_DOCUMENTS"], exist_ok=True)
    os.makedirs(app.config["EXPORT_FOLDER"], exist_ok=True)

    logging.basicConfig(level=app.config["LOG_LEVEL"], format=LOG_FORMAT)

    # Inisialisasi db, migrate, mail, login
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)
    login_manager.init_app(app)

    # Import models setelah db diinisialisasi
    from models import User  # noqa: F401

    register_identity(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    return app


def register_identity(app):
    from blueprints.helpers import bearer_token
    from models import User
    from services import auth as auth_service

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Authorization: Bearer <token>
    @login_manager.request_loader
    def load_user_from_request(request):
        token = bearer_token()
        if not token:
            return None
        return auth_service.resolve_actor(token)

    @login_manager.unauthorized_handler
    def unauthorized():
        error = AuthenticationFailed("Authentication required")
        return jsonify(error.to_dict()), error.status_code


def register_blueprints(app):
    from blueprints.applications.routes import applications_bp
    from blueprints.audit.routes import audit_bp
    from blueprints.auth.routes import auth_bp
    from blueprints.dashboard.routes import dashboard_bp
    from blueprints.documents.routes import documents_bp
    from blueprints.notifications.routes import notifications_bp
    from blueprints.population.routes import population_bp

    for bp in (auth_bp, population_bp, documents_bp, applications_bp, audit_bp, dashboard_bp, notifications_bp):
        app.register_blueprint(bp, url_prefix="/api")


def register_error_handlers(app):
    @app.errorhandler(RegistryError)
    def handle_registry_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        limit = app.config["MAX_DOCUMENT_SIZE"] // (1024 * 1024)
        return handle_registry_error(FileTooLarge(f"File size exceeds maximum limit of {limit}MB"))

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.name, "message": error.description}), error.code


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("purge-revoked-tokens")
    def purge_revoked_tokens():
        """Delete revoked-token rows whose tokens have expired."""
        from services import auth as auth_service

        removed = auth_service.purge_revoked_tokens()
        click.echo(f"Removed {removed} expired revoked token(s).")


if __name__ == "__main__":
    create_app().run(debug=True)
