import enum
from datetime import datetime

from werkzeug.security import generate_password_hash, check_password_hash

from scout_backend.extensions import db

USERS_TABLE = "users"


class UserRole(enum.Enum):
    PLAYER = "PLAYER"
    SCOUT = "SCOUT"
    ADMIN = "ADMIN"


class User(db.Model):
    __tablename__ = USERS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.PLAYER,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Participations and created challenges block deletion (ON DELETE RESTRICT)
    challenges_created = db.relationship(
        "Challenge", back_populates="creator", lazy="dynamic", passive_deletes="all"
    )
    participations = db.relationship(
        "ChallengeParticipant", back_populates="user", lazy="dynamic", passive_deletes="all"
    )

    # Helpers
    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User {self.id}: {self.email}>"
