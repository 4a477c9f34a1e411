from marshmallow import fields, pre_load, validate

from scout_backend.extensions import ma
from scout_backend.models import ChallengeParticipant, ParticipantStatus, ProgressLog
from scout_backend.schemas import CamelCaseMixin, RequestSchema
from scout_backend.schemas.challenge import ChallengeSchema, ChallengeSummarySchema
from scout_backend.schemas.user import UserSummarySchema


class ProgressLogSchema(CamelCaseMixin, ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ProgressLog
        include_fk = True


class ParticipantSchema(CamelCaseMixin, ma.SQLAlchemyAutoSchema):
    class Meta:
        model = ChallengeParticipant
        include_fk = True

    status = fields.Enum(ParticipantStatus)
    user = fields.Nested(UserSummarySchema)
    challenge = fields.Nested(ChallengeSchema)


# Derived views. These dump the plain result objects the progress engine returns.

class ProgressSummarySchema(CamelCaseMixin, ma.Schema):
    current_progress = fields.Float()
    target_progress = fields.Float()
    remaining = fields.Float()
    status = fields.Enum(ParticipantStatus)
    total_logs = fields.Integer()
    joined_at = fields.DateTime()
    completed_at = fields.DateTime(allow_none=True)


class CompletedEntrySchema(CamelCaseMixin, ma.Schema):
    rank = fields.Integer()
    participant_id = fields.Integer()
    user = fields.Nested(UserSummarySchema)
    progress = fields.Float()
    joined_at = fields.DateTime()
    completed_at = fields.DateTime(allow_none=True)
    time_to_complete = fields.Integer(allow_none=True)


class LeaderboardEntrySchema(CamelCaseMixin, ma.Schema):
    rank = fields.Integer()
    participant_id = fields.Integer()
    user = fields.Nested(UserSummarySchema)
    progress = fields.Float()
    status = fields.Enum(ParticipantStatus)
    completed_at = fields.DateTime(allow_none=True)
    total_activities = fields.Integer()


class UserChallengeEntrySchema(CamelCaseMixin, ma.Schema):
    participant_id = fields.Integer()
    challenge = fields.Nested(ChallengeSummarySchema)
    progress = fields.Float()
    status = fields.Enum(ParticipantStatus)
    joined_at = fields.DateTime()
    completed_at = fields.DateTime(allow_none=True)
    total_activities = fields.Integer()


class UserProgressStatsSchema(CamelCaseMixin, ma.Schema):
    total = fields.Integer()
    completed = fields.Integer()
    active = fields.Integer()
    dropped = fields.Integer()
    paused = fields.Integer()
    average_progress = fields.Float()


class FastestCompletionSchema(CamelCaseMixin, ma.Schema):
    user_id = fields.Integer()
    participant_id = fields.Integer()
    days = fields.Integer()


class ChallengeStatisticsSchema(CamelCaseMixin, ma.Schema):
    total_participants = fields.Integer()
    completed_count = fields.Integer()
    completion_rate = fields.String()
    average_progress = fields.Float()
    status_breakdown = fields.Dict(keys=fields.String(), values=fields.Integer())
    fastest_completion = fields.Nested(FastestCompletionSchema, allow_none=True)


# Request bodies and query strings

class JoinChallengeSchema(RequestSchema):
    challenge_id = fields.Integer(required=True)
    user_id = fields.Integer(required=True)


class ParticipantUpdateSchema(RequestSchema):
    challenge_id = fields.Integer()
    user_id = fields.Integer()


class ProgressUpdateSchema(RequestSchema):
    progress_delta = fields.Float(required=True, allow_nan=False)
    description = fields.String(required=True, validate=validate.Length(min=1))
    task_id = fields.Integer(allow_none=True, load_default=None)

    @pre_load
    def strip_description(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("description"), str):
            data = dict(data)
            data["description"] = data["description"].strip()
        return data


class StatusUpdateSchema(RequestSchema):
    # membership in ParticipantStatus is checked by the progress engine
    status = fields.String(required=True)


class CompletedQuerySchema(RequestSchema):
    sort_by = fields.String(load_default="completedAt")


class LeaderboardQuerySchema(RequestSchema):
    limit = fields.Integer(load_default=None)
    status = fields.String(load_default="all")
