import os
from app import create_app
from app.models import User
from app.models.enums import UserRole
from app.extensions import db

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@eventhub.io")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin12345")


def create_admin_user(update=False):
    app = create_app()
    with app.app_context():
        # Check if admin already exists
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if not admin:
            admin = User(
                name="Admin User",
                email=ADMIN_EMAIL,
                role=UserRole.ADMIN,
            )
            admin.set_password(ADMIN_PASSWORD)
            db.session.add(admin)
            db.session.commit()
            print("Admin user created successfully!")
        elif update:
            admin.set_password(ADMIN_PASSWORD)
            admin.role = UserRole.ADMIN
            db.session.commit()
            print("Admin user updated successfully!")
        else:
            print("Admin user already exists!")


if __name__ == "__main__":
    create_admin_user(update=True)
