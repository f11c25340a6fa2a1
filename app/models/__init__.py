from app.models.user import User
from app.models.event import Event
from app.models.registration import Registration
from app.models.check_in import CheckIn
from app.models.enums import RegistrationStatus, UserRole
