from datetime import datetime

from scout_backend.extensions import db


class Challenge(db.Model):
    __tablename__ = "challenges"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    start_at = db.Column(db.DateTime, nullable=True)
    end_at = db.Column(db.DateTime, nullable=True)
    target_progress = db.Column(db.Float, nullable=False, default=100.0, server_default="100")
    creator_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    creator = db.relationship("User", back_populates="challenges_created")
    participants = db.relationship(
        "ChallengeParticipant",
        back_populates="challenge",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        db.CheckConstraint("target_progress > 0", name="ck_challenges_target_positive"),
    )

    def __repr__(self):
        return f"<Challenge {self.id}: {self.title}>"
