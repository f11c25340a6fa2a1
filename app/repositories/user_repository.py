from typing import Dict, List
from sqlalchemy import func
from app.extensions import db
from app.models import User


class UserRepository:
    @staticmethod
    def sign_up(user):
        db.session.add(user)
        db.session.commit()
        return user

    @staticmethod
    def find_by_email(email):
        return User.query.filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def find_by_emails(emails: List[str]) -> Dict[str, User]:
        """Map lower-cased email -> user for every email that has an account."""
        if not emails:
            return {}
        lowered = [email.lower() for email in emails]
        users = User.query.filter(func.lower(User.email).in_(lowered)).all()
        return {user.email.lower(): user for user in users}

    @staticmethod
    def find_by_id(user_id: int):
        return db.session.get(User, user_id)
