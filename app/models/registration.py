from app.extensions import db
from app.utils.dates import isoformat, utcnow
from .enums import RegistrationStatus


class Registration(db.Model):
    __tablename__ = "registrations"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    # NULL for invited guests who do not have an account yet
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    invited_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    invited_email = db.Column(db.String(255), nullable=True)
    status = db.Column(db.Enum(RegistrationStatus), nullable=False, default=RegistrationStatus.PENDING)
    comments = db.Column(db.Text, nullable=True)
    confirmed_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    cancelled_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    registration_code = db.Column(db.String(64), nullable=False, unique=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    event = db.relationship("Event", back_populates="registrations")
    user = db.relationship("User", foreign_keys=[user_id])
    invited_by = db.relationship("User", foreign_keys=[invited_by_user_id])
    check_in = db.relationship(
        "CheckIn",
        back_populates="registration",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.UniqueConstraint("event_id", "user_id", name="uq_registration_event_user"),
    )

    def is_cancelled(self) -> bool:
        return self.status == RegistrationStatus.CANCELLED

    def is_confirmed(self) -> bool:
        return self.status == RegistrationStatus.CONFIRMED

    def is_checked_in(self) -> bool:
        return self.check_in is not None

    def is_guest(self) -> bool:
        return self.invited_by_user_id is not None

    def to_dict(self, include_event=False, include_user=False):
        data = {
            "id": self.id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "invited_by_user_id": self.invited_by_user_id,
            "invited_email": self.invited_email,
            "status": self.status.value if self.status else None,
            "comments": self.comments,
            "registration_code": self.registration_code,
            "confirmed_at": isoformat(self.confirmed_at),
            "cancelled_at": isoformat(self.cancelled_at),
            "checked_in": self.is_checked_in(),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_event and self.event:
            data["event"] = self.event.to_dict()
        if include_user:
            data["user"] = self.user.to_dict() if self.user else None
        return data

    def __repr__(self):
        return (
            f"Registration("
            f"id={self.id}, "
            f"event_id={self.event_id}, "
            f"user_id={self.user_id}, "
            f"status={self.status}, "
            f"registration_code={self.registration_code}"
            f")"
        )
