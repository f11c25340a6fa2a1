from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.extensions import db
from app.exceptions import (
    AlreadyCheckedInError,
    CancelledRegistrationError,
    ForbiddenError,
    InvalidCodeError,
    NotFoundError,
    TransactionFailureError,
)
from app.models import CheckIn
from app.repositories import CheckInRepository, RegistrationRepository
from app.services.authorization import get_owned_event, require_admin, require_authenticated, require_event_owner
from app.utils.codes import normalize_registration_code
from app.utils.dates import utcnow
from app.utils.pagination import paginate
from app.utils.validation import parse_day, parse_int, parse_string, require_fields

CHECK_INS_PER_PAGE = 20


class CheckInService:
    @staticmethod
    def build_check_in(registration, checked_by_user_id, notes=None, checked_in_at=None) -> CheckIn:
        """Create (but do not persist) the check-in record for ``registration``."""
        return CheckIn(
            registration_id=registration.id,
            event_id=registration.event_id,
            checked_by_user_id=checked_by_user_id,
            checked_in_at=checked_in_at or utcnow(),
            notes=notes,
        )

    @staticmethod
    def check_in(identity, data):
        """Check in a registration by its id (event owner only)."""
        require_admin(identity)
        data = data or {}
        require_fields(data, ["registration_id"])
        registration_id = parse_int(data["registration_id"], "registration_id", minimum=1)
        notes = parse_string(data.get("notes"), "notes")

        registration = RegistrationRepository.find_by_id(registration_id)
        if not registration:
            raise NotFoundError(f"Registration with ID {registration_id} not found")
        require_event_owner(identity, registration.event)

        return CheckInService._create_check_in(identity, registration, notes)

    @staticmethod
    def check_in_by_code(identity, data):
        """Check in a registration from its code, scoped to one event (event owner only)."""
        require_admin(identity)
        data = data or {}
        require_fields(data, ["event_id", "registration_code"])
        event_id = parse_int(data["event_id"], "event_id", minimum=1)
        code = parse_string(data["registration_code"], "registration_code", allow_empty=False)
        notes = parse_string(data.get("notes"), "notes")

        event = get_owned_event(identity, event_id)
        registration = RegistrationRepository.find_by_event_and_code(
            event.id, normalize_registration_code(code)
        )
        if not registration:
            current_app.logger.warning(f"Invalid registration code presented for event {event_id}")
            raise InvalidCodeError()

        return CheckInService._create_check_in(identity, registration, notes)

    @staticmethod
    def _create_check_in(identity, registration, notes):
        if registration.is_cancelled():
            raise CancelledRegistrationError()

        existing = CheckInRepository.find_by_registration_id(registration.id)
        if existing:
            raise AlreadyCheckedInError(existing)

        try:
            check_in = CheckInRepository.add(
                CheckInService.build_check_in(registration, identity.user_id, notes)
            )
            db.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent check-in of the same registration
            db.session.rollback()
            current_app.logger.warning(f"Concurrent check-in for registration {registration.id}")
            raise AlreadyCheckedInError(CheckInRepository.find_by_registration_id(registration.id))
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to check in registration {registration.id}: {str(e)}")
            raise TransactionFailureError("An error occurred while checking in", error=str(e))

        current_app.logger.info(
            f"Admin {identity.user_id} checked in registration {registration.id} for event {registration.event_id}"
        )
        return check_in

    @staticmethod
    def get_event_check_ins(identity, event_id, on_date=None, page=1, per_page=CHECK_INS_PER_PAGE):
        event = get_owned_event(identity, event_id)
        day = parse_day(on_date, "date") if on_date else None
        query = CheckInRepository.get_event_check_ins(event.id, day)
        return event, paginate(
            query, page, per_page, serializer=lambda c: c.to_dict(include_registration=True)
        )

    @staticmethod
    def get_check_in(identity, check_in_id):
        """Visible to the checked-in participant and to the event owner."""
        require_authenticated(identity)
        check_in = CheckInRepository.find_by_id(check_in_id)
        if not check_in:
            raise NotFoundError("Check-in not found")
        is_participant = check_in.registration.user_id == identity.user_id
        is_owner = identity.is_admin and check_in.event.is_owned_by(identity.user_id)
        if not (is_participant or is_owner):
            raise ForbiddenError()
        return check_in

    @staticmethod
    def delete_check_in(identity, check_in_id):
        require_admin(identity)
        check_in = CheckInRepository.find_by_id(check_in_id)
        if not check_in:
            raise NotFoundError("Check-in not found")
        require_event_owner(identity, check_in.event)

        registration_id = check_in.registration_id
        try:
            CheckInRepository.delete(check_in)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to delete check-in {check_in_id}: {str(e)}")
            raise TransactionFailureError("Failed to delete check-in", error=str(e))

        current_app.logger.info(
            f"Admin {identity.user_id} deleted check-in {check_in_id} (registration {registration_id})"
        )
