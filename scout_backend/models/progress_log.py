from datetime import datetime

from scout_backend.extensions import db


class ProgressLog(db.Model):
    """One progress update applied to a participant. Rows are never edited."""
    __tablename__ = "progress_logs"

    id = db.Column(db.Integer, primary_key=True)
    participant_id = db.Column(
        db.Integer,
        db.ForeignKey("challenge_participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id = db.Column(db.Integer, nullable=True)
    description = db.Column(db.Text, nullable=False)
    progress_delta = db.Column(db.Float, nullable=False)  # as submitted, before clamping
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    participant = db.relationship("ChallengeParticipant", back_populates="progress_logs")
