from flask import current_app
from app.exceptions import ForbiddenError, NotFoundError
from app.repositories import EventRepository


def require_authenticated(identity):
    if identity is None:
        raise ForbiddenError()


def require_admin(identity):
    require_authenticated(identity)
    if not identity.is_admin:
        current_app.logger.warning(f"User {identity.user_id} attempted an admin-only action")
        raise ForbiddenError()


def require_event_owner(identity, event):
    """Admin role plus ownership of ``event``."""
    require_admin(identity)
    if not event.is_owned_by(identity.user_id):
        current_app.logger.warning(
            f"Admin {identity.user_id} attempted to manage event {event.id} owned by {event.user_id}"
        )
        raise ForbiddenError()


def get_owned_event(identity, event_id):
    require_admin(identity)
    event = EventRepository.get_event(event_id)
    if not event:
        raise NotFoundError(f"Event with ID {event_id} not found")
    require_event_owner(identity, event)
    return event
