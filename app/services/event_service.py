from datetime import timezone
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from app.exceptions import ForbiddenError, NotFoundError, TransactionFailureError, ValidationError
from app.extensions import db
from app.repositories.event_repository import EventRepository, SORTABLE_FIELDS
from app.services.authorization import get_owned_event, require_admin
from app.utils.storage import delete_event_image, save_event_image
from app.utils.pagination import paginate
from app.utils.validation import (
    parse_bool,
    parse_date_field,
    parse_int,
    parse_string,
    require_fields,
    require_object,
)

EVENTS_PER_PAGE = 10
MAX_NAME_LENGTH = 255


def _parse_capacity(value):
    if value in (None, ""):
        return None
    return parse_int(value, "capacity", minimum=1)


class EventService:
    @staticmethod
    def get_events(identity, args):
        include_unpublished = identity is not None and identity.is_admin

        date_from = args.get("date_from")
        date_to = args.get("date_to")
        sort_by = args.get("sort_by", "start_date")
        sort_dir = args.get("sort_dir", "asc")

        query = EventRepository.get_events(
            include_unpublished=include_unpublished,
            search=args.get("search") or None,
            date_from=parse_date_field(date_from, "date_from") if date_from else None,
            date_to=parse_date_field(date_to, "date_to") if date_to else None,
            available_only=parse_bool(args.get("available_only", False), "available_only"),
            sort_by=sort_by if sort_by in SORTABLE_FIELDS else "start_date",
            sort_dir=sort_dir if sort_dir in ("asc", "desc") else "asc",
        )
        return paginate(
            query,
            args.get("page", 1, type=int),
            args.get("per_page", EVENTS_PER_PAGE, type=int),
        )

    @staticmethod
    def get_event(identity, event_id):
        event = EventRepository.get_event(event_id)
        if not event:
            raise NotFoundError(f"Event with ID {event_id} not found")

        if event.is_published:
            return event
        if identity and (identity.is_admin or event.is_owned_by(identity.user_id)):
            return event
        raise ForbiddenError("You are not authorized to view this event")

    @staticmethod
    def _validate(data, partial=False, current=None):
        """Validate event fields and return the attributes to persist.

        With ``partial=True`` only the provided fields are checked; the
        start/end ordering is then validated against ``current`` values.
        """
        require_object(data)
        if not partial:
            require_fields(data, ["name", "start_date", "end_date", "location"])

        attrs = {}
        if "name" in data:
            attrs["name"] = parse_string(data["name"], "name", MAX_NAME_LENGTH, allow_empty=False)
        if "description" in data:
            attrs["description"] = parse_string(data["description"], "description")
        if "location" in data:
            attrs["location"] = parse_string(data["location"], "location", MAX_NAME_LENGTH, allow_empty=False)
        if "start_date" in data:
            attrs["start_date"] = parse_date_field(data["start_date"], "start_date")
        if "end_date" in data:
            attrs["end_date"] = parse_date_field(data["end_date"], "end_date")
        if "capacity" in data:
            attrs["capacity"] = _parse_capacity(data["capacity"])
        if "is_published" in data:
            attrs["is_published"] = parse_bool(data["is_published"], "is_published")

        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if current is not None:
            start = start or current.start_date
            end = end or current.end_date
        if start and end and _as_comparable(end) < _as_comparable(start):
            raise ValidationError(
                {"end_date": ["The end date must be a date after or equal to start date."]}
            )
        return attrs

    @staticmethod
    def create_event(identity, data, image=None):
        require_admin(identity)
        attrs = EventService._validate(data)
        attrs.setdefault("is_published", False)
        attrs["user_id"] = identity.user_id

        if image and image.filename:
            attrs["image_path"] = save_event_image(image)

        try:
            event = EventRepository.create_event(attrs)
        except SQLAlchemyError as e:
            db.session.rollback()
            delete_event_image(attrs.get("image_path"))
            current_app.logger.error(f"Failed to create event: {str(e)}")
            raise TransactionFailureError("Failed to create event", error=str(e))

        current_app.logger.info(f"Admin {identity.user_id} created event {event.id}")
        return event

    @staticmethod
    def update_event(identity, event_id, data, image=None):
        event = get_owned_event(identity, event_id)
        attrs = EventService._validate(data, partial=True, current=event)

        old_image = None
        if image and image.filename:
            old_image = event.image_path
            attrs["image_path"] = save_event_image(image)

        try:
            event = EventRepository.update_event(event, attrs)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to update event {event_id}: {str(e)}")
            raise TransactionFailureError("Failed to update event", error=str(e))

        if old_image:
            delete_event_image(old_image)
        current_app.logger.info(f"Admin {identity.user_id} updated event {event_id}")
        return event

    @staticmethod
    def delete_event(identity, event_id):
        event = get_owned_event(identity, event_id)
        image_path = event.image_path

        try:
            EventRepository.delete_event(event)
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to delete event {event_id}: {str(e)}")
            raise TransactionFailureError("An error occurred while deleting the event", error=str(e))

        delete_event_image(image_path)
        current_app.logger.info(f"Admin {identity.user_id} deleted event {event_id}")


def _as_comparable(value):
    # Values read back from SQLite are naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)
