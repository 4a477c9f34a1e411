from datetime import datetime

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from scout_backend.extensions import db

home_bp = Blueprint('main_bp', __name__)


@home_bp.route('/')
def home():
    return jsonify({
        "msg": "Scout Backend API is running!",
        "status": "OK",
        "environment": current_app.config.get("ENV_NAME"),
    })


@home_bp.route('/health')
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Health check could not reach the database: {e}")
        database = "unavailable"

    payload = {
        "status": "healthy" if database == "connected" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "database": database,
    }
    return jsonify(payload), 200 if database == "connected" else 503
