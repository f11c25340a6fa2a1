from typing import Dict, List, Optional
from app.extensions import db
from app.models import Registration
from app.models.enums import RegistrationStatus


class RegistrationRepository:
    @staticmethod
    def find_by_id(registration_id: int) -> Optional[Registration]:
        return db.session.get(Registration, registration_id)

    @staticmethod
    def find_by_id_and_user(registration_id: int, user_id: int) -> Optional[Registration]:
        return Registration.query.filter_by(id=registration_id, user_id=user_id).first()

    @staticmethod
    def find_by_event_and_user(event_id: int, user_id: int) -> Optional[Registration]:
        return Registration.query.filter_by(event_id=event_id, user_id=user_id).first()

    @staticmethod
    def find_by_event_and_users(event_id: int, user_ids: List[int]) -> Dict[int, Registration]:
        """Map user id -> registration for the given users that are already registered."""
        if not user_ids:
            return {}
        registrations = Registration.query.filter(
            Registration.event_id == event_id,
            Registration.user_id.in_(user_ids),
        ).all()
        return {registration.user_id: registration for registration in registrations}

    @staticmethod
    def find_by_event_and_code(event_id: int, registration_code: str) -> Optional[Registration]:
        return Registration.query.filter_by(
            event_id=event_id, registration_code=registration_code
        ).first()

    @staticmethod
    def code_exists(registration_code: str) -> bool:
        return (
            db.session.query(Registration.id)
            .filter_by(registration_code=registration_code)
            .first()
            is not None
        )

    @staticmethod
    def count_by_event_id_and_status(
        event_id: int, statuses: List[RegistrationStatus]
    ) -> int:
        """Count registrations for an event with specific statuses."""
        return (
            Registration.query.filter(Registration.event_id == event_id)
            .filter(Registration.status.in_(statuses))
            .count()
        )

    @staticmethod
    def get_user_registrations(user_id: int):
        return Registration.query.filter_by(user_id=user_id).order_by(
            Registration.created_at.desc(), Registration.id.desc()
        )

    @staticmethod
    def get_event_participants(event_id: int, status: Optional[RegistrationStatus] = None):
        query = Registration.query.filter_by(event_id=event_id)
        if status:
            query = query.filter(Registration.status == status)
        return query.order_by(Registration.created_at.desc(), Registration.id.desc())

    @staticmethod
    def add(registration: Registration) -> Registration:
        """Stage a registration in the current transaction and flush it.

        The caller owns the commit; a unique-constraint violation surfaces
        here as ``IntegrityError``.
        """
        db.session.add(registration)
        db.session.flush()
        return registration

    @staticmethod
    def save(registration: Registration) -> Registration:
        db.session.add(registration)
        db.session.commit()
        return registration
