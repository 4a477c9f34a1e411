from flask import jsonify
from flask_jwt_extended import jwt_required

from scout_backend.extensions import db
from scout_backend.schemas.participant import UserChallengeEntrySchema, UserProgressStatsSchema
from scout_backend.schemas.user import UserSchema, UserUpdateSchema
from scout_backend.services import users as user_service
from scout_backend.utils.decorators import inject_current_user, roles_required
from . import api_bp, get_progress_engine, load_body

user_schema = UserSchema()
user_update_schema = UserUpdateSchema()
stats_schema = UserProgressStatsSchema()
user_challenge_schema = UserChallengeEntrySchema(many=True)


@api_bp.route("/users", methods=["GET"])
@jwt_required()
def list_users():
    return jsonify(user_schema.dump(user_service.list_users(db.session), many=True))


@api_bp.route("/users/<int:user_id>", methods=["GET"])
@jwt_required()
def get_user(user_id):
    return jsonify(user_schema.dump(user_service.get_user(db.session, user_id)))


@api_bp.route("/users/<int:user_id>", methods=["PUT"])
@inject_current_user
def update_user(user_id, actor):
    data = load_body(user_update_schema, "Invalid user data")
    user = user_service.update_user(db.session, user_id, actor, data)
    return jsonify(user_schema.dump(user))


@api_bp.route("/users/<int:user_id>", methods=["DELETE"])
@roles_required("ADMIN")
def delete_user(user_id):
    user_service.delete_user(db.session, user_id)
    return jsonify({"msg": "User deleted"})


@api_bp.route("/users/<int:user_id>/progress", methods=["GET"])
@jwt_required()
def user_progress(user_id):
    """A user's participations across all challenges, newest first, with totals."""
    progress = get_progress_engine().user_progress(user_id)
    return jsonify({
        "userId": progress.user_id,
        "stats": stats_schema.dump(progress.stats),
        "challenges": user_challenge_schema.dump(progress.challenges),
    })
