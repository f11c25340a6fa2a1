from enum import Enum


class RegistrationStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Statuses that occupy a seat when counting against an event's capacity
ACTIVE_REGISTRATION_STATUSES = [RegistrationStatus.PENDING, RegistrationStatus.CONFIRMED]


class UserRole(Enum):
    ADMIN = "admin"
    PARTICIPANT = "participant"
