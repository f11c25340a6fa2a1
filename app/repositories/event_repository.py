from sqlalchemy import or_, select, func
from app.extensions import db
from app.models import Event, Registration
from app.models.enums import ACTIVE_REGISTRATION_STATUSES

SORTABLE_FIELDS = {
    "name": Event.name,
    "start_date": Event.start_date,
    "location": Event.location,
    "created_at": Event.created_at,
}


class EventRepository:
    @staticmethod
    def get_events(
        include_unpublished=False,
        search=None,
        date_from=None,
        date_to=None,
        available_only=False,
        sort_by="start_date",
        sort_dir="asc",
    ):
        query = Event.query
        if not include_unpublished:
            query = query.filter(Event.is_published.is_(True))

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Event.name.ilike(pattern),
                    Event.description.ilike(pattern),
                    Event.location.ilike(pattern),
                )
            )

        if date_from:
            query = query.filter(Event.start_date >= date_from)
        if date_to:
            query = query.filter(Event.start_date <= date_to)

        if available_only:
            taken = (
                select(func.count(Registration.id))
                .where(
                    Registration.event_id == Event.id,
                    Registration.status.in_(ACTIVE_REGISTRATION_STATUSES),
                )
                .correlate(Event)
                .scalar_subquery()
            )
            query = query.filter(or_(Event.capacity.is_(None), Event.capacity > taken))

        column = SORTABLE_FIELDS.get(sort_by, Event.start_date)
        ordering = column.desc() if sort_dir == "desc" else column.asc()
        return query.order_by(ordering, Event.id.asc())

    @staticmethod
    def get_event(event_id: int) -> Event:
        return Event.query.filter_by(id=event_id).first()

    @staticmethod
    def get_event_for_update(event_id: int) -> Event:
        """Load an event and lock its row until the current transaction ends.

        Backends without row locks (SQLite) silently ignore ``FOR UPDATE``.
        """
        return Event.query.filter_by(id=event_id).with_for_update().first()

    @staticmethod
    def create_event(attrs):
        event = Event(**attrs)
        db.session.add(event)
        db.session.commit()
        return event

    @staticmethod
    def update_event(event: Event, attrs: dict):
        for key, value in attrs.items():
            if hasattr(event, key):
                setattr(event, key, value)
        db.session.commit()
        return event

    @staticmethod
    def delete_event(event: Event):
        db.session.delete(event)
        db.session.commit()
