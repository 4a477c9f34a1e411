import logging

from sqlalchemy.orm import Session, selectinload

from scout_backend.errors import ForbiddenError, NotFoundError, ValidationError
from scout_backend.models import Challenge, User
from scout_backend.services.store import unit_of_work

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "start_at", "end_at", "target_progress")


def _warn_if_unreachable(challenge: Challenge, progress_cap: float):
    if challenge.target_progress is not None and challenge.target_progress > progress_cap:
        logger.warning(
            "Challenge %s targets %s but progress is capped at %s; it cannot be completed by progress updates",
            challenge.id, challenge.target_progress, progress_cap,
        )


def _check_authorized(challenge: Challenge, actor: User, action: str):
    if challenge.creator_id != actor.id and not actor.is_admin:
        raise ForbiddenError(f"Not authorized to {action} this challenge")


def create_challenge(db: Session, creator: User, data: dict, progress_cap=100.0,
                     default_target=100.0):
    challenge = Challenge(
        title=data["title"],
        description=data.get("description"),
        start_at=data.get("start_at"),
        end_at=data.get("end_at"),
        target_progress=data.get("target_progress") or default_target,
        creator_id=creator.id,
    )
    with unit_of_work(db, missing_message="Creator not found"):
        db.add(challenge)

    logger.info("Challenge %s created by user %s", challenge.id, creator.id)
    _warn_if_unreachable(challenge, progress_cap)
    return challenge


def list_challenges(db: Session):
    return (
        db.query(Challenge)
        .options(selectinload(Challenge.creator))
        .order_by(Challenge.created_at.desc(), Challenge.id.desc())
        .all()
    )


def get_challenge(db: Session, challenge_id: int):
    challenge = db.get(Challenge, challenge_id)
    if challenge is None:
        raise NotFoundError("Challenge not found")
    return challenge


def update_challenge(db: Session, challenge_id: int, actor: User, data: dict, progress_cap=100.0):
    challenge = get_challenge(db, challenge_id)
    _check_authorized(challenge, actor, "update")

    start_at = data.get("start_at", challenge.start_at)
    end_at = data.get("end_at", challenge.end_at)
    if start_at and end_at and end_at < start_at:
        raise ValidationError("endAt must not be before startAt")

    with unit_of_work(db):
        for key in EDITABLE_FIELDS:
            if key in data and not (key in ("title", "target_progress") and data[key] is None):
                setattr(challenge, key, data[key])

    _warn_if_unreachable(challenge, progress_cap)
    return challenge


def delete_challenge(db: Session, challenge_id: int, actor: User):
    challenge = get_challenge(db, challenge_id)
    _check_authorized(challenge, actor, "delete")

    with unit_of_work(db):
        db.delete(challenge)
    logger.info("Challenge %s deleted by user %s", challenge_id, actor.id)
