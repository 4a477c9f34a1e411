from marshmallow import fields, pre_load, validate

from scout_backend.extensions import ma
from scout_backend.models import User, UserRole
from scout_backend.schemas import CamelCaseMixin, RequestSchema

PASSWORD_LENGTH = validate.Length(min=6, error="Password must be at least 6 characters long")
# admin accounts come from `flask create-admin` or an admin's update
SELF_SERVICE_ROLES = [UserRole.PLAYER.value, UserRole.SCOUT.value]


def normalize_account_fields(data):
    if not isinstance(data, dict):
        return data
    data = dict(data)
    if isinstance(data.get("email"), str):
        data["email"] = data["email"].strip().lower()
    if isinstance(data.get("name"), str):
        data["name"] = data["name"].strip()
    if isinstance(data.get("role"), str):
        data["role"] = data["role"].strip().upper()
    return data


class UserSchema(CamelCaseMixin, ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        exclude = ("password_hash",)

    role = fields.Enum(UserRole)


class UserSummarySchema(CamelCaseMixin, ma.Schema):
    id = fields.Integer()
    name = fields.String()
    email = fields.String()


class RegisterSchema(RequestSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=PASSWORD_LENGTH)
    name = fields.String(required=True, validate=validate.Length(min=1, max=150))
    role = fields.String(
        load_default=UserRole.PLAYER.value,
        validate=validate.OneOf(SELF_SERVICE_ROLES, error="Invalid role. Must be one of: {choices}"),
    )

    @pre_load
    def normalize(self, data, **kwargs):
        return normalize_account_fields(data)


class UserUpdateSchema(RequestSchema):
    email = fields.Email()
    password = fields.String(validate=PASSWORD_LENGTH)
    name = fields.String(validate=validate.Length(min=1, max=150))
    role = fields.String(
        validate=validate.OneOf(
            [role.value for role in UserRole],
            error="Invalid role. Must be one of: {choices}",
        ),
    )

    @pre_load
    def normalize(self, data, **kwargs):
        return normalize_account_fields(data)


class LoginSchema(RequestSchema):
    email = fields.String(required=True)
    password = fields.String(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data)
            data["email"] = data["email"].strip().lower()
        return data


class PasswordChangeSchema(RequestSchema):
    current_password = fields.String(required=True)
    new_password = fields.String(
        required=True,
        validate=validate.Length(min=6, error="New password must be at least 6 characters long"),
    )
