"""
Tests for the registration workflow: capacity, duplicate prevention,
guest invitations, cancellation and admin status transitions.
"""

import pytest

from app.exceptions import (
    AlreadyRegisteredError,
    CapacityExceededError,
    ForbiddenError,
    MissingFieldsError,
    NotFoundError,
    TransactionFailureError,
    ValidationError,
)
from app.models import Registration
from app.models.enums import RegistrationStatus
from app.repositories import RegistrationRepository
from app.services.registration_service import MAX_CODE_ATTEMPTS, RegistrationService


def count_registrations(event):
    return Registration.query.filter_by(event_id=event.id).count()


class TestCreateRegistration:
    def test_registration_with_guest_fills_capacity(self, admin, participant, make_event, identity_for):
        event = make_event(admin, capacity=2)

        registration, guests = RegistrationService.create_registration(
            identity_for(participant),
            {"event_id": event.id, "guest_emails": ["guest@partyguests.org"]},
        )

        assert registration.user_id == participant.id
        assert registration.status == RegistrationStatus.PENDING
        assert len(guests) == 1
        guest = guests[0]
        assert guest.user_id is None
        assert guest.invited_by_user_id == participant.id
        assert guest.invited_email == "guest@partyguests.org"
        assert guest.status == RegistrationStatus.PENDING
        assert guest.registration_code != registration.registration_code
        assert count_registrations(event) == 2

    def test_capacity_exceeded_writes_nothing(self, admin, participant, make_user, make_event, identity_for):
        event = make_event(admin, capacity=2)
        RegistrationService.create_registration(
            identity_for(participant),
            {"event_id": event.id, "guest_emails": ["guest@partyguests.org"]},
        )
        latecomer = make_user()

        with pytest.raises(CapacityExceededError):
            RegistrationService.create_registration(identity_for(latecomer), {"event_id": event.id})

        assert count_registrations(event) == 2
        assert Registration.query.filter_by(event_id=event.id, user_id=latecomer.id).first() is None

    def test_guests_count_toward_capacity(self, admin, participant, make_event, identity_for):
        event = make_event(admin, capacity=2)

        with pytest.raises(CapacityExceededError):
            RegistrationService.create_registration(
                identity_for(participant),
                {"event_id": event.id, "guest_emails": ["a@partyguests.org", "b@partyguests.org"]},
            )

        assert count_registrations(event) == 0

    def test_cancelled_registrations_free_a_seat(
        self, admin, participant, make_user, make_event, make_registration, identity_for
    ):
        event = make_event(admin, capacity=1)
        make_registration(event, make_user(), status=RegistrationStatus.CANCELLED)

        registration, _ = RegistrationService.create_registration(
            identity_for(participant), {"event_id": event.id}
        )

        assert registration.id is not None

    def test_confirmed_registrations_occupy_seats(
        self, admin, participant, make_user, make_event, make_registration, identity_for
    ):
        event = make_event(admin, capacity=1)
        make_registration(event, make_user(), status=RegistrationStatus.CONFIRMED)

        with pytest.raises(CapacityExceededError):
            RegistrationService.create_registration(identity_for(participant), {"event_id": event.id})

    def test_unlimited_capacity(self, admin, participant, make_event, identity_for):
        event = make_event(admin, capacity=None)
        emails = [f"guest{i}@partyguests.org" for i in range(45)]

        registration, guests = RegistrationService.create_registration(
            identity_for(participant), {"event_id": event.id, "guest_emails": emails}
        )

        assert len(guests) == 45
        assert count_registrations(event) == 46
        codes = {r.registration_code for r in [registration] + guests}
        assert len(codes) == 46

    def test_duplicate_registration_rejected(self, admin, participant, make_event, identity_for):
        event = make_event(admin)
        RegistrationService.create_registration(identity_for(participant), {"event_id": event.id})

        with pytest.raises(AlreadyRegisteredError):
            RegistrationService.create_registration(identity_for(participant), {"event_id": event.id})

        assert count_registrations(event) == 1

    def test_cancelled_registration_still_blocks_reregistration(
        self, admin, participant, make_event, make_registration, identity_for
    ):
        event = make_event(admin)
        make_registration(event, participant, status=RegistrationStatus.CANCELLED)

        with pytest.raises(AlreadyRegisteredError):
            RegistrationService.create_registration(identity_for(participant), {"event_id": event.id})

    def test_unknown_event(self, participant, identity_for):
        with pytest.raises(NotFoundError):
            RegistrationService.create_registration(identity_for(participant), {"event_id": 999})

    def test_registration_code_format(self, admin, participant, make_event, identity_for):
        event = make_event(admin)

        registration, _ = RegistrationService.create_registration(
            identity_for(participant), {"event_id": event.id, "comments": "Vegetarian meal please"}
        )

        assert len(registration.registration_code) == 8
        assert registration.registration_code.isalnum()
        assert registration.registration_code == registration.registration_code.upper()
        assert registration.comments == "Vegetarian meal please"

    def test_guest_with_account_is_linked(self, admin, participant, make_user, make_event, identity_for):
        event = make_event(admin)
        friend = make_user(email="bob@eventhub.io")

        _, guests = RegistrationService.create_registration(
            identity_for(participant), {"event_id": event.id, "guest_emails": ["Bob@eventhub.io"]}
        )

        assert guests[0].user_id == friend.id

    def test_guest_already_registered_is_rejected(
        self, admin, participant, make_user, make_event, make_registration, identity_for
    ):
        event = make_event(admin)
        friend = make_user(email="bob@eventhub.io")
        make_registration(event, friend)

        with pytest.raises(AlreadyRegisteredError) as excinfo:
            RegistrationService.create_registration(
                identity_for(participant), {"event_id": event.id, "guest_emails": ["bob@eventhub.io"]}
            )

        assert "bob@eventhub.io" in excinfo.value.message
        assert count_registrations(event) == 1

    def test_cannot_invite_yourself(self, admin, participant, make_event, identity_for):
        event = make_event(admin)

        with pytest.raises(AlreadyRegisteredError):
            RegistrationService.create_registration(
                identity_for(participant), {"event_id": event.id, "guest_emails": [participant.email]}
            )

        assert count_registrations(event) == 0

    def test_too_many_guests(self, admin, participant, make_event, identity_for):
        event = make_event(admin)
        emails = [f"guest{i}@partyguests.org" for i in range(46)]

        with pytest.raises(ValidationError) as excinfo:
            RegistrationService.create_registration(
                identity_for(participant), {"event_id": event.id, "guest_emails": emails}
            )

        assert "guest_emails" in excinfo.value.errors

    def test_duplicate_guest_emails(self, admin, participant, make_event, identity_for):
        event = make_event(admin)

        with pytest.raises(ValidationError) as excinfo:
            RegistrationService.create_registration(
                identity_for(participant),
                {"event_id": event.id, "guest_emails": ["a@partyguests.org", "A@partyguests.org"]},
            )

        assert "guest_emails.1" in excinfo.value.errors

    def test_invalid_guest_email(self, admin, participant, make_event, identity_for):
        event = make_event(admin)

        with pytest.raises(ValidationError) as excinfo:
            RegistrationService.create_registration(
                identity_for(participant), {"event_id": event.id, "guest_emails": ["not-an-email"]}
            )

        assert "guest_emails.0" in excinfo.value.errors

    def test_missing_event_id(self, participant, identity_for):
        with pytest.raises(MissingFieldsError) as excinfo:
            RegistrationService.create_registration(identity_for(participant), {})

        assert excinfo.value.fields == ["event_id"]

    def test_comment_too_long(self, admin, participant, make_event, identity_for):
        event = make_event(admin)

        with pytest.raises(ValidationError):
            RegistrationService.create_registration(
                identity_for(participant), {"event_id": event.id, "comments": "x" * 1001}
            )


class TestRegistrationCodeCollisions:
    @pytest.fixture
    def stale_code_check(self, monkeypatch):
        # Another transaction can take a code between the existence check and the insert
        monkeypatch.setattr(RegistrationRepository, "code_exists", staticmethod(lambda code: False))

    def test_code_taken_at_insert_is_regenerated(
        self, admin, participant, make_user, make_event, make_registration, identity_for,
        stale_code_check, monkeypatch,
    ):
        event = make_event(admin)
        make_registration(event, make_user(), registration_code="TAKEN123")
        codes = iter(["TAKEN123", "FRESH456"])
        monkeypatch.setattr(
            "app.services.registration_service.generate_registration_code", lambda: next(codes)
        )

        registration, _ = RegistrationService.create_registration(
            identity_for(participant), {"event_id": event.id}
        )

        assert registration.registration_code == "FRESH456"
        assert registration.user_id == participant.id
        assert count_registrations(event) == 2

    def test_guest_code_collision_retries_whole_request(
        self, admin, participant, make_user, make_event, make_registration, identity_for,
        stale_code_check, monkeypatch,
    ):
        event = make_event(admin)
        make_registration(event, make_user(), registration_code="TAKEN123")
        codes = iter(["SELF0001", "TAKEN123", "SELF0002", "GUEST002"])
        monkeypatch.setattr(
            "app.services.registration_service.generate_registration_code", lambda: next(codes)
        )

        registration, guests = RegistrationService.create_registration(
            identity_for(participant), {"event_id": event.id, "guest_emails": ["guest@partyguests.org"]}
        )

        assert registration.registration_code == "SELF0002"
        assert guests[0].registration_code == "GUEST002"
        assert count_registrations(event) == 3

    def test_gives_up_after_bounded_attempts(
        self, admin, participant, make_user, make_event, make_registration, identity_for,
        stale_code_check, monkeypatch,
    ):
        event = make_event(admin)
        make_registration(event, make_user(), registration_code="TAKEN123")
        calls = []

        def always_taken():
            calls.append(1)
            return "TAKEN123"

        monkeypatch.setattr("app.services.registration_service.generate_registration_code", always_taken)

        with pytest.raises(TransactionFailureError):
            RegistrationService.create_registration(identity_for(participant), {"event_id": event.id})

        assert len(calls) == MAX_CODE_ATTEMPTS
        assert count_registrations(event) == 1


class TestCancelRegistration:
    def test_cancel_sets_status_and_timestamp(self, admin, participant, make_event, make_registration, identity_for):
        event = make_event(admin)
        registration = make_registration(event, participant)

        cancelled = RegistrationService.cancel_registration(identity_for(participant), registration.id)

        assert cancelled.status == RegistrationStatus.CANCELLED
        assert cancelled.cancelled_at is not None

    def test_second_cancel_keeps_timestamp(self, admin, participant, make_event, make_registration, identity_for):
        event = make_event(admin)
        registration = make_registration(event, participant)

        first = RegistrationService.cancel_registration(identity_for(participant), registration.id)
        cancelled_at = first.cancelled_at
        second = RegistrationService.cancel_registration(identity_for(participant), registration.id)

        assert second.status == RegistrationStatus.CANCELLED
        assert second.cancelled_at == cancelled_at

    def test_cannot_cancel_someone_elses_registration(
        self, admin, participant, make_user, make_event, make_registration, identity_for
    ):
        event = make_event(admin)
        registration = make_registration(event, participant)

        with pytest.raises(NotFoundError):
            RegistrationService.cancel_registration(identity_for(make_user()), registration.id)

        assert registration.status == RegistrationStatus.PENDING


class TestUpdateStatus:
    def test_confirm_sets_confirmed_at_once(self, admin, participant, make_event, make_registration, identity_for):
        event = make_event(admin)
        registration = make_registration(event, participant)

        first = RegistrationService.update_status(identity_for(admin), registration.id, {"status": "confirmed"})
        confirmed_at = first.confirmed_at
        second = RegistrationService.update_status(identity_for(admin), registration.id, {"status": "confirmed"})

        assert confirmed_at is not None
        assert second.status == RegistrationStatus.CONFIRMED
        assert second.confirmed_at == confirmed_at

    def test_cancel_via_status_sets_cancelled_at_once(
        self, admin, participant, make_event, make_registration, identity_for
    ):
        event = make_event(admin)
        registration = make_registration(event, participant)

        first = RegistrationService.update_status(identity_for(admin), registration.id, {"status": "cancelled"})
        cancelled_at = first.cancelled_at
        second = RegistrationService.update_status(identity_for(admin), registration.id, {"status": "cancelled"})

        assert cancelled_at is not None
        assert second.cancelled_at == cancelled_at
        assert second.confirmed_at is None

    def test_back_to_pending_keeps_timestamps(self, admin, participant, make_event, make_registration, identity_for):
        event = make_event(admin)
        registration = make_registration(event, participant, status=RegistrationStatus.CONFIRMED)
        confirmed_at = registration.confirmed_at

        updated = RegistrationService.update_status(identity_for(admin), registration.id, {"status": "pending"})

        assert updated.status == RegistrationStatus.PENDING
        assert updated.confirmed_at == confirmed_at

    def test_invalid_status(self, admin, participant, make_event, make_registration, identity_for):
        event = make_event(admin)
        registration = make_registration(event, participant)

        with pytest.raises(ValidationError) as excinfo:
            RegistrationService.update_status(identity_for(admin), registration.id, {"status": "attended"})

        assert "status" in excinfo.value.errors

    def test_participant_cannot_update_status(self, admin, participant, make_event, make_registration, identity_for):
        event = make_event(admin)
        registration = make_registration(event, participant)

        with pytest.raises(ForbiddenError):
            RegistrationService.update_status(identity_for(participant), registration.id, {"status": "confirmed"})

    def test_other_admin_cannot_update_status(
        self, admin, other_admin, participant, make_event, make_registration, identity_for
    ):
        event = make_event(admin)
        registration = make_registration(event, participant)

        with pytest.raises(ForbiddenError):
            RegistrationService.update_status(identity_for(other_admin), registration.id, {"status": "confirmed"})

    def test_unknown_registration(self, admin, identity_for):
        with pytest.raises(NotFoundError):
            RegistrationService.update_status(identity_for(admin), 404, {"status": "confirmed"})


class TestListings:
    def test_event_participants_filtered_by_status(
        self, admin, make_user, make_event, make_registration, identity_for
    ):
        event = make_event(admin)
        make_registration(event, make_user(), status=RegistrationStatus.CONFIRMED)
        make_registration(event, make_user(), status=RegistrationStatus.PENDING)
        make_registration(event, make_user(), status=RegistrationStatus.CONFIRMED)

        _, confirmed = RegistrationService.get_event_participants(identity_for(admin), event.id, status="confirmed")
        _, everyone = RegistrationService.get_event_participants(identity_for(admin), event.id)

        assert confirmed["total"] == 2
        assert all(item["status"] == "confirmed" for item in confirmed["items"])
        assert everyone["total"] == 3
        assert everyone["items"][0]["id"] > everyone["items"][-1]["id"]

    def test_event_participants_requires_owner(self, admin, other_admin, make_event, identity_for):
        event = make_event(admin)

        with pytest.raises(ForbiddenError):
            RegistrationService.get_event_participants(identity_for(other_admin), event.id)

    def test_user_registrations_only_lists_own(
        self, admin, participant, make_user, make_event, make_registration, identity_for
    ):
        first = make_event(admin, name="First")
        second = make_event(admin, name="Second")
        make_registration(first, participant)
        make_registration(second, participant)
        make_registration(first, make_user())

        page = RegistrationService.get_user_registrations(identity_for(participant))

        assert page["total"] == 2
        assert {item["event"]["name"] for item in page["items"]} == {"First", "Second"}
