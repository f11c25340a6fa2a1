from datetime import datetime, timedelta, timezone
from typing import Optional
from app.extensions import db
from app.models import CheckIn


class CheckInRepository:
    @staticmethod
    def find_by_id(check_in_id: int) -> Optional[CheckIn]:
        return db.session.get(CheckIn, check_in_id)

    @staticmethod
    def find_by_registration_id(registration_id: int) -> Optional[CheckIn]:
        return CheckIn.query.filter_by(registration_id=registration_id).first()

    @staticmethod
    def count_by_event_id(event_id: int) -> int:
        return CheckIn.query.filter_by(event_id=event_id).count()

    @staticmethod
    def get_event_check_ins(event_id: int, on_date=None):
        query = CheckIn.query.filter_by(event_id=event_id)
        if on_date:
            day_start = datetime(on_date.year, on_date.month, on_date.day, tzinfo=timezone.utc)
            query = query.filter(
                CheckIn.checked_in_at >= day_start,
                CheckIn.checked_in_at < day_start + timedelta(days=1),
            )
        return query.order_by(CheckIn.checked_in_at.desc(), CheckIn.id.desc())

    @staticmethod
    def add(check_in: CheckIn) -> CheckIn:
        db.session.add(check_in)
        db.session.flush()
        return check_in

    @staticmethod
    def delete(check_in: CheckIn):
        db.session.delete(check_in)
        db.session.commit()
