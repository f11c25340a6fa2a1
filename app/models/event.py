from app.extensions import db
from app.utils.dates import isoformat
from .enums import RegistrationStatus


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    end_date = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    capacity = db.Column(db.Integer, nullable=True)  # NULL means unlimited
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    image_path = db.Column(db.String(255), nullable=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("User", back_populates="events")
    registrations = db.relationship(
        "Registration",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy=True,
    )
    check_ins = db.relationship(
        "CheckIn",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def participant_count(self) -> int:
        from .registration import Registration

        return Registration.query.filter_by(
            event_id=self.id, status=RegistrationStatus.CONFIRMED
        ).count()

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "location": self.location,
            "capacity": self.capacity,
            "is_published": self.is_published,
            "image_path": self.image_path,
            "image_url": f"/uploads/{self.image_path}" if self.image_path else None,
            "participant_count": self.participant_count,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"Event(id={self.id}, name='{self.name}', capacity={self.capacity})"
