from app.repositories.user_repository import UserRepository
from app.repositories.event_repository import EventRepository
from app.repositories.registration_repository import RegistrationRepository
from app.repositories.check_in_repository import CheckInRepository
