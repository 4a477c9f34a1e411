import enum
from datetime import datetime

from scout_backend.extensions import db


class ParticipantStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
    PAUSED = "PAUSED"

    @classmethod
    def values(cls):
        return [status.value for status in cls]


class ChallengeParticipant(db.Model):
    __tablename__ = "challenge_participants"

    id = db.Column(db.Integer, primary_key=True)
    challenge_id = db.Column(
        db.Integer, db.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    progress = db.Column(db.Float, nullable=False, default=0.0, server_default="0")
    status = db.Column(
        db.Enum(ParticipantStatus, name="participant_status"),
        nullable=False,
        default=ParticipantStatus.ACTIVE,
        server_default=ParticipantStatus.ACTIVE.value,
    )
    joined_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    completed_at = db.Column(db.DateTime, nullable=True)

    challenge = db.relationship("Challenge", back_populates="participants")
    user = db.relationship("User", back_populates="participations")
    progress_logs = db.relationship(
        "ProgressLog",
        back_populates="participant",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(ProgressLog.created_at), desc(ProgressLog.id)",
    )

    __table_args__ = (
        db.UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participants_challenge_user"),
        db.Index("idx_challenge_participants_status", "status"),
        db.Index("idx_challenge_participants_progress", "progress"),
    )

    @property
    def is_completed(self):
        return self.status == ParticipantStatus.COMPLETED

    def recent_logs(self, limit):
        return self.progress_logs.limit(limit).all()

    def __repr__(self):
        return f"<ChallengeParticipant {self.id}: challenge={self.challenge_id} user={self.user_id} {self.progress}>"
