from app.services.user_service import UserService
from app.services.event_service import EventService
from app.services.registration_service import RegistrationService
from app.services.check_in_service import CheckInService
from app.services.statistics_service import StatisticsService
