"""Create a demo admin, a few participants and a published event with registrations.

Run from the project root:  python -m scripts.seed_demo_data
"""

from datetime import timedelta
from app import create_app
from app.extensions import db
from app.models import Event, Registration, User
from app.models.enums import RegistrationStatus, UserRole
from app.services.registration_service import RegistrationService
from app.utils.dates import utcnow

DEMO_PASSWORD = "password123"


def get_or_create_user(email, name, role):
    user = User.query.filter_by(email=email).first()
    if user:
        return user
    user = User(name=name, email=email, role=role)
    user.set_password(DEMO_PASSWORD)
    db.session.add(user)
    db.session.flush()
    return user


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        admin = get_or_create_user("organizer@eventhub.io", "Demo Organizer", UserRole.ADMIN)
        participants = [
            get_or_create_user(f"participant{i}@eventhub.io", f"Participant {i}", UserRole.PARTICIPANT)
            for i in range(1, 6)
        ]

        starts = utcnow() + timedelta(days=14)
        event = Event(
            user_id=admin.id,
            name="Community Tech Meetup",
            description="Lightning talks and networking.",
            start_date=starts,
            end_date=starts + timedelta(hours=3),
            location="Main Hall",
            capacity=50,
            is_published=True,
        )
        db.session.add(event)
        db.session.flush()

        codes = set()
        for index, participant in enumerate(participants):
            status = RegistrationStatus.CONFIRMED if index % 2 == 0 else RegistrationStatus.PENDING
            registration = Registration(
                event_id=event.id,
                user_id=participant.id,
                status=status,
                confirmed_at=utcnow() if status == RegistrationStatus.CONFIRMED else None,
                registration_code=RegistrationService.new_registration_code(codes),
            )
            codes.add(registration.registration_code)
            db.session.add(registration)

        db.session.commit()
        print(f"Seeded event {event.id} with {len(participants)} registrations")
        for registration in event.registrations:
            print(f"  {registration.user.email}: {registration.status.value} ({registration.registration_code})")


if __name__ == "__main__":
    seed()
