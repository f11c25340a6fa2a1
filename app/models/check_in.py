from app.extensions import db
from app.utils.dates import isoformat, utcnow


class CheckIn(db.Model):
    __tablename__ = "check_ins"

    id = db.Column(db.Integer, primary_key=True)
    registration_id = db.Column(
        db.Integer, db.ForeignKey("registrations.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    checked_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    checked_in_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    registration = db.relationship("Registration", back_populates="check_in")
    event = db.relationship("Event", back_populates="check_ins")
    checked_by = db.relationship("User", foreign_keys=[checked_by_user_id])

    def to_dict(self, include_registration=False):
        data = {
            "id": self.id,
            "registration_id": self.registration_id,
            "event_id": self.event_id,
            "checked_by_user_id": self.checked_by_user_id,
            "checked_in_at": isoformat(self.checked_in_at),
            "notes": self.notes,
            "created_at": isoformat(self.created_at),
        }
        if include_registration and self.registration:
            data["registration"] = self.registration.to_dict(include_user=True)
        return data

    def __repr__(self):
        return (
            f"CheckIn(id={self.id}, registration_id={self.registration_id}, "
            f"checked_in_at={self.checked_in_at})"
        )
