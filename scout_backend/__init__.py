import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from scout_backend.config import config
from scout_backend.errors import register_error_handlers
from scout_backend.extensions import db, jwt, limiter, ma, migrate
from scout_backend.models import User


def configure_logging(app):
    """Route the application and service loggers through one handler."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format=app.config.get('LOG_FORMAT'))
    logging.getLogger('scout_backend').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name=None):
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')

    # --- FLASK SETUP ---
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    configure_logging(app)

    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    CORS(app, resources={r"/api/*": {
        "origins": app.config['CORS_ORIGINS'],
        "allow_headers": ["Content-Type", "Authorization"],
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    }})

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"msg": "Token has expired"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({"msg": f"Invalid token: {error}"}), 401

    @jwt.unauthorized_loader
    def unauthorized_callback(error):
        return jsonify({"msg": "Access token required"}), 401

    @jwt.user_lookup_error_loader
    def user_lookup_error_callback(jwt_header, jwt_payload):
        return jsonify({"msg": "User for this token no longer exists"}), 401

    register_error_handlers(app)

    from scout_backend.routes import api_bp
    from scout_backend.routes.home import home_bp
    from scout_backend.commands import register_commands

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(home_bp)
    register_commands(app)

    app.logger.info(f"Scout backend started with '{config_name}' configuration")
    return app


# JWT callback
@jwt.user_lookup_loader
def user_lookup_callback(_jwt_header, jwt_data):
    identity = jwt_data["sub"]
    return db.session.get(User, int(identity))
