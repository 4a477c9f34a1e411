from flask import current_app, jsonify
from flask_jwt_extended import create_access_token, current_user, jwt_required

from scout_backend.extensions import db, limiter
from scout_backend.schemas.user import LoginSchema, PasswordChangeSchema, RegisterSchema, UserSchema
from scout_backend.services import users as user_service
from . import api_bp, load_body

user_schema = UserSchema()
register_schema = RegisterSchema()
login_schema = LoginSchema()
password_change_schema = PasswordChangeSchema()


def _auth_rate_limit():
    return current_app.config["AUTH_RATE_LIMIT"]


@api_bp.route("/users/register", methods=["POST"])
@limiter.limit(_auth_rate_limit)
def register():
    data = load_body(register_schema, "Email, password, and name are required")
    user = user_service.create_user(
        db.session,
        email=data["email"],
        name=data["name"],
        password=data["password"],
        role=data["role"],
    )
    return jsonify({"msg": "Registered successfully", "user": user_schema.dump(user)}), 201


@api_bp.route("/users/login", methods=["POST"])
@limiter.limit(_auth_rate_limit)
def login():
    data = load_body(login_schema, "Email and password are required")
    user = user_service.authenticate(db.session, data["email"], data["password"])

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role.value},
    )
    current_app.logger.info(f"Login successful for user {user.id}")
    return jsonify({
        "msg": "Login successful",
        "accessToken": access_token,
        "user": user_schema.dump(user),
    }), 200


@api_bp.route("/users/me", methods=["GET"])
@jwt_required()
def me():
    return jsonify(user_schema.dump(current_user))


@api_bp.route("/users/update-password", methods=["PUT"])
@jwt_required()
def update_password():
    data = load_body(password_change_schema, "Current password and new password are required")
    user_service.change_password(db.session, current_user, data["current_password"], data["new_password"])
    return jsonify({"msg": "Password updated successfully."})
