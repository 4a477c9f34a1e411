from datetime import timezone

from marshmallow import ValidationError, fields, post_load, validate, validates_schema

from scout_backend.extensions import ma
from scout_backend.models import Challenge
from scout_backend.schemas import CamelCaseMixin, RequestSchema
from scout_backend.schemas.user import UserSummarySchema


class ChallengeSchema(CamelCaseMixin, ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Challenge
        include_fk = True


class ChallengeDetailSchema(ChallengeSchema):
    creator = fields.Nested(UserSummarySchema)
    participant_count = fields.Method("get_participant_count")

    def get_participant_count(self, challenge):
        return challenge.participants.count()


class ChallengeSummarySchema(CamelCaseMixin, ma.Schema):
    """Challenge fields embedded in a user's progress overview."""
    id = fields.Integer()
    title = fields.String()
    description = fields.String()
    start_at = fields.DateTime()
    end_at = fields.DateTime()
    target_progress = fields.Float()


def _naive_utc(value):
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ChallengeInputSchema(RequestSchema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=150))
    description = fields.String(allow_none=True)
    start_at = fields.DateTime(allow_none=True)
    end_at = fields.DateTime(allow_none=True)
    target_progress = fields.Float(
        allow_nan=False,
        validate=validate.Range(min=0, min_inclusive=False, error="targetProgress must be greater than 0"),
    )

    @post_load
    def to_naive_utc(self, data, **kwargs):
        for key in ("start_at", "end_at"):
            if key in data:
                data[key] = _naive_utc(data[key])
        return data

    @validates_schema
    def validate_window(self, data, **kwargs):
        start_at, end_at = _naive_utc(data.get("start_at")), _naive_utc(data.get("end_at"))
        if start_at and end_at and end_at < start_at:
            raise ValidationError("endAt must not be before startAt", "endAt")
