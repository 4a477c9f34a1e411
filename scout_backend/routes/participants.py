from flask import current_app, jsonify
from flask_jwt_extended import jwt_required

from scout_backend.schemas.participant import (
    JoinChallengeSchema, ParticipantSchema, ParticipantUpdateSchema,
    ProgressLogSchema, ProgressSummarySchema, ProgressUpdateSchema, StatusUpdateSchema
)
from . import api_bp, get_progress_engine, load_body

participant_schema = ParticipantSchema()
log_schema = ProgressLogSchema()
summary_schema = ProgressSummarySchema()


def _with_logs(participant, logs):
    data = participant_schema.dump(participant)
    data["progressLogs"] = log_schema.dump(logs, many=True)
    return data


@api_bp.route("/participants", methods=["POST"])
@jwt_required()
def join_challenge():
    data = load_body(JoinChallengeSchema(), "challengeId and userId are required")
    participant = get_progress_engine().join_challenge(data["challenge_id"], data["user_id"])
    return jsonify(participant_schema.dump(participant)), 201


@api_bp.route("/participants", methods=["GET"])
@jwt_required()
def list_participants():
    return jsonify(participant_schema.dump(get_progress_engine().list_participants(), many=True))


@api_bp.route("/participants/<int:participant_id>", methods=["GET"])
@jwt_required()
def get_participant(participant_id):
    return jsonify(participant_schema.dump(get_progress_engine().get_participant(participant_id)))


@api_bp.route("/participants/<int:participant_id>", methods=["PUT"])
@jwt_required()
def update_participant(participant_id):
    data = load_body(ParticipantUpdateSchema(), "Invalid participant data")
    participant = get_progress_engine().update_participant(
        participant_id,
        challenge_id=data.get("challenge_id"),
        user_id=data.get("user_id"),
    )
    return jsonify(participant_schema.dump(participant))


@api_bp.route("/participants/<int:participant_id>", methods=["DELETE"])
@jwt_required()
def remove_participant(participant_id):
    engine = get_progress_engine()
    removed = participant_schema.dump(engine.get_participant(participant_id))
    engine.remove_participant(participant_id)
    return jsonify({"msg": "Participant removed", "participant": removed})


@api_bp.route("/participants/challenge/<int:challenge_id>", methods=["GET"])
@jwt_required()
def participants_for_challenge(challenge_id):
    participants = get_progress_engine().participants_for_challenge(challenge_id)
    return jsonify(participant_schema.dump(participants, many=True))


@api_bp.route("/participants/user/<int:user_id>", methods=["GET"])
@jwt_required()
def participations_for_user(user_id):
    participants = get_progress_engine().participations_for_user(user_id)
    return jsonify(participant_schema.dump(participants, many=True))


@api_bp.route("/participants/<int:participant_id>/progress", methods=["PUT"])
@jwt_required()
def record_progress(participant_id):
    data = load_body(ProgressUpdateSchema(), "progressDelta and description are required")
    update = get_progress_engine().record_progress(
        participant_id,
        progress_delta=data["progress_delta"],
        description=data["description"],
        task_id=data.get("task_id"),
    )
    current_app.logger.debug(f"Participant {participant_id}: {update.message}")
    return jsonify({
        "participant": _with_logs(update.participant, update.recent_logs),
        "newLog": log_schema.dump(update.log),
        "message": update.message,
    })


@api_bp.route("/participants/<int:participant_id>/progress", methods=["GET"])
@jwt_required()
def participant_progress(participant_id):
    progress = get_progress_engine().get_participant_progress(participant_id)
    return jsonify({
        "participant": _with_logs(progress.participant, progress.logs),
        "summary": summary_schema.dump(progress.summary),
    })


@api_bp.route("/participants/<int:participant_id>/status", methods=["PUT"])
@jwt_required()
def update_status(participant_id):
    data = load_body(StatusUpdateSchema(), "status is required")
    participant = get_progress_engine().update_status(participant_id, data["status"])
    return jsonify({
        "message": f"Status updated to {participant.status.value}",
        "participant": participant_schema.dump(participant),
    })
