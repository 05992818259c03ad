import logging
import os

from flask import Flask, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
)


def create_app(config_name=None):
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(
        app, db, directory=app.config["MIGRATIONS_DIR"], render_as_batch=True
    )
    limiter.init_app(app)

    # Token authentication for the JSON API
    from lastman.utils.auth import load_user_from_request, unauthorized_response

    login_manager.request_loader(load_user_from_request)
    login_manager.unauthorized_handler(unauthorized_response)

    # Import and register blueprints
    from lastman.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Register error handlers
    register_error_handlers(app)

    # Setup logging
    from lastman.utils.logging_config import setup_logging

    setup_logging(app)

    show_config_warnings(app, config_name)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def show_config_warnings(app, config_name):
    """Log configuration warnings and status"""
    logger.info(f"Last Man Standing starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        logger.warning("DEBUG mode is enabled in production!")

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if "sqlite" in db_url:
        logger.info("Using SQLite database (development mode)")
        logger.warning(
            "SQLite ignores row locks; run concurrent settlement against PostgreSQL"
        )
    elif "postgresql" in db_url:
        logger.info("Using PostgreSQL database")
    else:
        logger.info(
            f"Using database: {db_url.split('://')[0] if '://' in db_url else 'Unknown'}"
        )


def register_error_handlers(app):
    """Register global error handlers"""

    @app.after_request
    def after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    @app.errorhandler(404)
    def not_found_error(error):
        return (
            jsonify({"return_code": "NOT_FOUND", "message": "Resource not found"}),
            404,
        )

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return (
            jsonify(
                {"return_code": "METHOD_NOT_ALLOWED", "message": "Method not allowed"}
            ),
            405,
        )

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return (
            jsonify({"return_code": "RATE_LIMITED", "message": "Too many requests"}),
            429,
        )

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return (
            jsonify({"return_code": "SERVER_ERROR", "message": "Internal server error"}),
            500,
        )


from lastman import models  # noqa: F401, E402 - imported for model registration
