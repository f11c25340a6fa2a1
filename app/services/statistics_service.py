from app.models.enums import RegistrationStatus
from app.repositories import CheckInRepository, RegistrationRepository
from app.services.authorization import get_owned_event


def compute_check_in_rate(checked_in_count: int, registration_count: int):
    """Percentage of confirmed registrations that checked in, to two decimals."""
    if registration_count <= 0:
        return 0
    return round(checked_in_count / registration_count * 100, 2)


class StatisticsService:
    @staticmethod
    def get_check_in_statistics(identity, event_id):
        event = get_owned_event(identity, event_id)

        # Only confirmed registrations count as expected attendance
        registration_count = RegistrationRepository.count_by_event_id_and_status(
            event.id, [RegistrationStatus.CONFIRMED]
        )
        checked_in_count = CheckInRepository.count_by_event_id(event.id)

        return event, {
            "registration_count": registration_count,
            "checked_in_count": checked_in_count,
            "check_in_rate": compute_check_in_rate(checked_in_count, registration_count),
        }
