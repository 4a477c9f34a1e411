import logging

from sqlalchemy.orm import Session

from scout_backend.errors import (
    ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
)
from scout_backend.models import Challenge, ChallengeParticipant, User, UserRole
from scout_backend.services.store import unit_of_work

logger = logging.getLogger(__name__)


def create_user(db: Session, email: str, name: str, password: str, role=UserRole.PLAYER):
    if db.query(User).filter_by(email=email).first():
        raise ConflictError("Email already in use")

    user = User(email=email, name=name, role=UserRole(role))
    user.set_password(password)
    with unit_of_work(db, conflict_message="Email already in use"):
        db.add(user)
    logger.info("User %s registered with role %s", user.id, user.role.value)
    return user


def authenticate(db: Session, email: str, password: str):
    user = db.query(User).filter_by(email=email).first()
    if not user or not user.check_password(password):
        logger.info("Login failed for %s", email)
        raise UnauthorizedError("Invalid credentials")
    return user


def get_user(db: Session, user_id: int):
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session):
    return db.query(User).order_by(User.id).all()


def delete_user(db: Session, user_id: int):
    user = get_user(db, user_id)

    # participant and challenge rows reference users with ON DELETE RESTRICT
    owns_challenges = db.query(Challenge.id).filter_by(creator_id=user_id).first() is not None
    has_participations = db.query(ChallengeParticipant.id).filter_by(user_id=user_id).first() is not None
    if owns_challenges or has_participations:
        raise ConflictError("User still owns challenges or challenge participations")

    with unit_of_work(db, conflict_message="User is still referenced by other records"):
        db.delete(user)
    logger.info("User %s deleted", user_id)


def update_user(db: Session, user_id: int, actor: User, data: dict):
    user = get_user(db, user_id)
    if actor.id != user.id and not actor.is_admin:
        raise ForbiddenError("Not authorized to update this user")
    if "role" in data and not actor.is_admin:
        raise ForbiddenError("Only admins may change roles")

    email = data.get("email")
    if email and email != user.email and db.query(User).filter_by(email=email).first():
        raise ConflictError("Email already in use")

    with unit_of_work(db, conflict_message="Email already in use"):
        if email:
            user.email = email
        if data.get("name"):
            user.name = data["name"]
        if data.get("password"):
            user.set_password(data["password"])
        if data.get("role"):
            user.role = UserRole(data["role"])

    logger.info("User %s updated by user %s", user_id, actor.id)
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str):
    if not user.check_password(current_password):
        raise UnauthorizedError("Current password is incorrect")
    if user.check_password(new_password):
        raise ValidationError("New password must be different from current password")

    with unit_of_work(db):
        user.set_password(new_password)
    logger.info("User %s changed their password", user.id)
