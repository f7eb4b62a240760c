import os

from app import create_app
from extensions import db
from models.user import User

app = create_app()

with app.app_context():
    db.create_all()
    username = os.getenv("ADMIN_USERNAME", "superadmin")
    existing_admin = User.query.filter_by(username=username).first()
    if existing_admin:
        print("⚠️ Super admin account already exists!")
    else:
        admin = User(
            username=username,
            email=os.getenv("ADMIN_EMAIL", "superadmin@dukcapil.local"),
            role="SUPER_ADMIN",
        )
        admin.set_password(os.getenv("ADMIN_PASSWORD", "admin123"))
        db.session.add(admin)
        db.session.commit()
        print("Super admin account created successfully!")
