import logging

import click
from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import DBStorage
from utils.tokens import TokenService

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Itinerary Catalog API",
        "version": "1.0.0",
        "description": "REST API for travel itineraries, their details, optional add-ons and media.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def _ensure_secrets(app: Flask) -> None:
    fallback = app.config.get("SECRET_FALLBACK")
    for key in ("JWT_SECRET", "JWT_REFRESH_SECRET"):
        if app.config.get(key):
            continue
        if fallback is None:
            raise RuntimeError(f"{key} must be set")
        logger.warning("%s is not set; using a random per-process value", key)
        app.config[key] = fallback()
    if app.config["JWT_SECRET"] == app.config["JWT_REFRESH_SECRET"]:
        raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must differ")


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    The storage and token service belong to the app (app.extensions), so each
    app, and each test, gets its own.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    _ensure_secrets(app)

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQLALCHEMY_ECHO", False))
    storage.reload()
    token_service = TokenService(
        storage,
        access_secret=app.config["JWT_SECRET"],
        refresh_secret=app.config["JWT_REFRESH_SECRET"],
        algorithm=app.config["JWT_ALGORITHM"],
        access_ttl=app.config["ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=app.config["REFRESH_TOKEN_EXPIRES"],
        single_use_refresh=app.config["REFRESH_TOKEN_SINGLE_USE"],
        issuer=app.config["JWT_ISSUER"],
    )
    app.extensions["storage"] = storage
    app.extensions["token_service"] = token_service

    from .health import bp as health_bp
    from .users import bp as users_bp
    from .itineraries import bp as itineraries_bp
    from .details import bp as details_bp
    from .optionals import bp as optionals_bp
    from .media import bp as media_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(itineraries_bp)
    app.register_blueprint(details_bp)
    app.register_blueprint(optionals_bp)
    app.register_blueprint(media_bp)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Server is running!",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    @app.cli.command("purge-refresh-tokens")
    def purge_refresh_tokens():
        """Delete refresh tokens past their expiry."""
        removed = token_service.purge_expired()
        click.echo(f"Removed {removed} expired refresh token(s)")

    return app
