from liga.extensions import db
from datetime import datetime, timezone
import enum


class CaptainRequestStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CaptainRequest(db.Model):
    __tablename__ = "captain_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    reason = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.Enum(CaptainRequestStatus),
        nullable=False,
        default=CaptainRequestStatus.PENDING,
    )
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    user = db.relationship("User", backref="captain_requests")

    def __repr__(self):
        return f"<CaptainRequest {self.user_id} {self.status.value}>"
