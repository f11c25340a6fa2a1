from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.extensions import db
from app.exceptions import (
    ApiError,
    AlreadyRegisteredError,
    CapacityExceededError,
    NotFoundError,
    TransactionFailureError,
)
from app.models import Registration
from app.models.enums import ACTIVE_REGISTRATION_STATUSES, RegistrationStatus
from app.repositories import EventRepository, RegistrationRepository, UserRepository
from app.services.authorization import get_owned_event, require_admin, require_authenticated
from app.utils.codes import generate_registration_code
from app.utils.dates import utcnow
from app.utils.email import send_guest_invitation_email
from app.utils.pagination import paginate
from app.utils.validation import (
    parse_email_list,
    parse_enum,
    parse_int,
    parse_string,
    require_fields,
)

MAX_GUESTS = 45
MAX_COMMENT_LENGTH = 1000
MAX_CODE_ATTEMPTS = 10
PARTICIPANTS_PER_PAGE = 15
REGISTRATIONS_PER_PAGE = 10


def _is_code_collision(error: IntegrityError) -> bool:
    # Both SQLite and PostgreSQL name the violated column/constraint in the message
    return "registration_code" in str(error.orig)


class RegistrationService:
    @staticmethod
    def new_registration_code(reserved=()):
        """Generate a registration code not used by any stored registration or by ``reserved``."""
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_registration_code()
            if code in reserved or RegistrationRepository.code_exists(code):
                current_app.logger.warning("Registration code collision, generating a new one")
                continue
            return code
        raise TransactionFailureError(
            "Registration failed", error="Could not generate a unique registration code"
        )

    @staticmethod
    def create_registration(identity, data):
        """Register the caller for an event, optionally inviting guests.

        Returns ``(registration, guest_registrations)``. Nothing is written
        unless every check passes.
        """
        require_authenticated(identity)
        data = data or {}
        require_fields(data, ["event_id"])
        event_id = parse_int(data["event_id"], "event_id", minimum=1)
        comments = parse_string(data.get("comments"), "comments", max_length=MAX_COMMENT_LENGTH)
        guest_emails = parse_email_list(data.get("guest_emails"), "guest_emails", MAX_GUESTS)
        user_id = identity.user_id

        current_app.logger.info(
            f"Registration attempt: user {user_id} for event {event_id} with {len(guest_emails)} guests"
        )

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            try:
                registration, guest_registrations = RegistrationService._insert_registrations(
                    event_id, user_id, comments, guest_emails
                )
                db.session.commit()
                break
            except ApiError:
                db.session.rollback()
                raise
            except IntegrityError as e:
                db.session.rollback()
                if _is_code_collision(e) and attempt < MAX_CODE_ATTEMPTS:
                    current_app.logger.warning(
                        f"Registration code collision on insert for event {event_id}, retrying ({attempt})"
                    )
                    continue
                if RegistrationRepository.find_by_event_and_user(event_id, user_id):
                    current_app.logger.warning(
                        f"Concurrent duplicate registration for user {user_id}, event {event_id}"
                    )
                    raise AlreadyRegisteredError()
                current_app.logger.error(f"Failed to register user {user_id} for event {event_id}: {str(e)}")
                raise TransactionFailureError("Registration failed", error=str(e.orig))
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.error(f"Failed to register user {user_id} for event {event_id}: {str(e)}")
                raise TransactionFailureError("Registration failed", error=str(e))

        current_app.logger.info(
            f"Registered user {user_id} for event {event_id} "
            f"(registration {registration.id}, {len(guest_registrations)} guests)"
        )
        RegistrationService._send_invitations(registration, guest_registrations)
        return registration, guest_registrations

    @staticmethod
    def _insert_registrations(event_id, user_id, comments, guest_emails):
        """Run the capacity and duplicate checks, then stage every row of one registration request."""
        event = EventRepository.get_event_for_update(event_id)
        if not event:
            raise NotFoundError(f"Event with ID {event_id} not found")

        if event.capacity:
            existing_count = RegistrationRepository.count_by_event_id_and_status(
                event_id, ACTIVE_REGISTRATION_STATUSES
            )
            total = existing_count + 1 + len(guest_emails)
            current_app.logger.info(
                f"Capacity check for event {event_id}: {total}/{event.capacity}"
            )
            if total > event.capacity:
                raise CapacityExceededError()

        if RegistrationRepository.find_by_event_and_user(event_id, user_id):
            raise AlreadyRegisteredError()

        guest_users = UserRepository.find_by_emails(guest_emails)
        RegistrationService._check_guest_conflicts(event_id, user_id, guest_emails, guest_users)

        codes = set()
        registration = Registration(
            event_id=event_id,
            user_id=user_id,
            status=RegistrationStatus.PENDING,
            comments=comments,
            registration_code=RegistrationService.new_registration_code(codes),
        )
        codes.add(registration.registration_code)
        RegistrationRepository.add(registration)

        guest_registrations = []
        for email in guest_emails:
            guest_user = guest_users.get(email.lower())
            guest_registration = Registration(
                event_id=event_id,
                user_id=guest_user.id if guest_user else None,
                invited_by_user_id=user_id,
                invited_email=email,
                status=RegistrationStatus.PENDING,
                registration_code=RegistrationService.new_registration_code(codes),
            )
            codes.add(guest_registration.registration_code)
            RegistrationRepository.add(guest_registration)
            guest_registrations.append(guest_registration)

        return registration, guest_registrations

    @staticmethod
    def _check_guest_conflicts(event_id, user_id, guest_emails, guest_users):
        if not guest_users:
            return
        registered = RegistrationRepository.find_by_event_and_users(
            event_id, [user.id for user in guest_users.values()]
        )
        for email in guest_emails:
            guest_user = guest_users.get(email.lower())
            if guest_user is None:
                continue
            if guest_user.id == user_id:
                raise AlreadyRegisteredError("You cannot invite yourself as a guest")
            if guest_user.id in registered:
                raise AlreadyRegisteredError(f"{email} is already registered for this event")

    @staticmethod
    def _send_invitations(registration, guest_registrations):
        if not guest_registrations:
            return
        event = registration.event
        inviter = registration.user
        for guest_registration in guest_registrations:
            try:
                send_guest_invitation_email(guest_registration, event, inviter)
            except Exception as e:
                current_app.logger.error(
                    f"Failed to send invitation to {guest_registration.invited_email}: {str(e)}"
                )

    @staticmethod
    def get_user_registrations(identity, page=1, per_page=REGISTRATIONS_PER_PAGE):
        require_authenticated(identity)
        query = RegistrationRepository.get_user_registrations(identity.user_id)
        return paginate(
            query, page, per_page, serializer=lambda r: r.to_dict(include_event=True)
        )

    @staticmethod
    def get_user_registration(identity, registration_id):
        require_authenticated(identity)
        registration = RegistrationRepository.find_by_id_and_user(registration_id, identity.user_id)
        if not registration:
            raise NotFoundError("Registration not found")
        return registration

    @staticmethod
    def cancel_registration(identity, registration_id):
        registration = RegistrationService.get_user_registration(identity, registration_id)

        if registration.is_cancelled():
            current_app.logger.info(f"Registration {registration_id} is already cancelled")
            return registration

        registration.status = RegistrationStatus.CANCELLED
        registration.cancelled_at = utcnow()
        try:
            RegistrationRepository.save(registration)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to cancel registration {registration_id}: {str(e)}")
            raise TransactionFailureError("Failed to cancel registration", error=str(e))

        current_app.logger.info(f"User {identity.user_id} cancelled registration {registration_id}")
        return registration

    @staticmethod
    def get_event_participants(identity, event_id, status=None, page=1, per_page=PARTICIPANTS_PER_PAGE):
        event = get_owned_event(identity, event_id)
        status_filter = parse_enum(status, RegistrationStatus, "status") if status else None
        query = RegistrationRepository.get_event_participants(event.id, status_filter)
        return event, paginate(
            query, page, per_page, serializer=lambda r: r.to_dict(include_user=True)
        )

    @staticmethod
    def update_status(identity, registration_id, data):
        """Move a registration to a new status (event owner only).

        ``confirmed_at``/``cancelled_at`` are stamped only when the status
        actually changes into that state.
        """
        require_admin(identity)
        data = data or {}
        require_fields(data, ["status"])
        new_status = parse_enum(data["status"], RegistrationStatus, "status")

        registration = RegistrationRepository.find_by_id(registration_id)
        if not registration:
            raise NotFoundError("Registration not found")
        get_owned_event(identity, registration.event_id)

        old_status = registration.status
        registration.status = new_status
        if old_status != new_status:
            if new_status == RegistrationStatus.CONFIRMED:
                registration.confirmed_at = utcnow()
            elif new_status == RegistrationStatus.CANCELLED:
                registration.cancelled_at = utcnow()

        try:
            RegistrationRepository.save(registration)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to update registration {registration_id}: {str(e)}")
            raise TransactionFailureError("Failed to update registration status", error=str(e))

        current_app.logger.info(
            f"Registration {registration_id} status {old_status.value} -> {new_status.value}"
        )
        return registration
