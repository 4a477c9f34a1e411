from flask import Blueprint, current_app, request
from marshmallow import ValidationError as SchemaValidationError

from scout_backend.errors import ValidationError
from scout_backend.extensions import db
from scout_backend.services.challenge_progress import ChallengeProgressEngine

api_bp = Blueprint("api", __name__)


def load_body(schema, message="Invalid request", partial=False):
    """Validate the JSON body with ``schema``; failures become a 400."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    try:
        return schema.load(payload, partial=partial)
    except SchemaValidationError as err:
        raise ValidationError(message, errors=err.messages)


def load_args(schema):
    try:
        return schema.load(request.args)
    except SchemaValidationError as err:
        raise ValidationError("Invalid query parameters", errors=err.messages)


def get_progress_engine():
    cfg = current_app.config
    return ChallengeProgressEngine(
        db.session,
        progress_cap=cfg["PROGRESS_CAP"],
        default_target=cfg["DEFAULT_TARGET_PROGRESS"],
        leaderboard_limit=cfg["LEADERBOARD_DEFAULT_LIMIT"],
        recent_logs_limit=cfg["RECENT_LOGS_LIMIT"],
    )


# register the route modules on api_bp
from . import auth, user, challenges, participants  # noqa: E402,F401
