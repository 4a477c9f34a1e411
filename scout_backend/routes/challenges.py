from flask import current_app, jsonify
from flask_jwt_extended import jwt_required

from scout_backend.extensions import db
from scout_backend.schemas.challenge import ChallengeDetailSchema, ChallengeInputSchema
from scout_backend.schemas.participant import (
    ChallengeStatisticsSchema, CompletedEntrySchema, CompletedQuerySchema,
    LeaderboardEntrySchema, LeaderboardQuerySchema
)
from scout_backend.services import challenges as challenge_service
from scout_backend.utils.decorators import inject_current_user
from . import api_bp, get_progress_engine, load_args, load_body

challenge_schema = ChallengeDetailSchema()
challenge_input_schema = ChallengeInputSchema()
completed_schema = CompletedEntrySchema(many=True)
leaderboard_schema = LeaderboardEntrySchema(many=True)
statistics_schema = ChallengeStatisticsSchema()


@api_bp.route("/challenges", methods=["POST"])
@inject_current_user
def create_challenge(actor):
    data = load_body(challenge_input_schema, "Invalid challenge data")
    challenge = challenge_service.create_challenge(
        db.session,
        creator=actor,
        data=data,
        progress_cap=current_app.config["PROGRESS_CAP"],
        default_target=current_app.config["DEFAULT_TARGET_PROGRESS"],
    )
    return jsonify({"msg": "Challenge created", "data": challenge_schema.dump(challenge)}), 201


@api_bp.route("/challenges", methods=["GET"])
@jwt_required()
def list_challenges():
    return jsonify(challenge_schema.dump(challenge_service.list_challenges(db.session), many=True))


@api_bp.route("/challenges/<int:challenge_id>", methods=["GET"])
@jwt_required()
def get_challenge(challenge_id):
    return jsonify(challenge_schema.dump(challenge_service.get_challenge(db.session, challenge_id)))


@api_bp.route("/challenges/<int:challenge_id>", methods=["PUT"])
@inject_current_user
def update_challenge(challenge_id, actor):
    data = load_body(challenge_input_schema, "Invalid challenge data", partial=True)
    challenge = challenge_service.update_challenge(
        db.session, challenge_id, actor, data,
        progress_cap=current_app.config["PROGRESS_CAP"],
    )
    return jsonify({"msg": "Challenge updated", "data": challenge_schema.dump(challenge)})


@api_bp.route("/challenges/<int:challenge_id>", methods=["DELETE"])
@inject_current_user
def delete_challenge(challenge_id, actor):
    challenge_service.delete_challenge(db.session, challenge_id, actor)
    return jsonify({"msg": "Challenge deleted"})


@api_bp.route("/challenges/<int:challenge_id>/completed", methods=["GET"])
@jwt_required()
def completed_participants(challenge_id):
    args = load_args(CompletedQuerySchema())
    entries = get_progress_engine().list_completed(challenge_id, sort_by=args["sort_by"])
    return jsonify({
        "challengeId": challenge_id,
        "totalCompleted": len(entries),
        "participants": completed_schema.dump(entries),
    })


@api_bp.route("/challenges/<int:challenge_id>/leaderboard", methods=["GET"])
@jwt_required()
def leaderboard(challenge_id):
    args = load_args(LeaderboardQuerySchema())
    entries = get_progress_engine().leaderboard(challenge_id, limit=args["limit"], status=args["status"])
    return jsonify({"challengeId": challenge_id, "leaderboard": leaderboard_schema.dump(entries)})


@api_bp.route("/challenges/<int:challenge_id>/statistics", methods=["GET"])
@jwt_required()
def statistics(challenge_id):
    challenge, stats = get_progress_engine().challenge_statistics(challenge_id)
    return jsonify({
        "challengeId": challenge.id,
        "challengeTitle": challenge.title,
        "statistics": statistics_schema.dump(stats),
    })
