# backend/stockledger/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def _allowed_origin(app: Flask, origin: str | None) -> str | None:
    if not origin:
        return None
    configured = app.config.get("CORS_ALLOWED_ORIGINS", "*")
    if isinstance(configured, str):
        configured = {o.strip() for o in configured.split(",") if o.strip()}
    if "*" in configured or origin in configured:
        return origin
    return None


def init_database(app: Flask) -> None:
    """Create missing tables and seed default users (both idempotent)."""
    from .services.auth_service import seed_default_users

    with app.app_context():
        if app.config.get("AUTO_CREATE_SCHEMA"):
            db.create_all()
            app.logger.info("Database schema ready")
        if app.config.get("SEED_DEFAULT_USERS"):
            seed_default_users()


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Single draft slot for the lifetime of this app
    from .services import draft_service
    draft_service.init_app(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.purchases import purchases_bp
    from .routes.drafts import drafts_bp
    from .routes.auth import auth_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(purchases_bp)
    app.register_blueprint(drafts_bp)
    app.register_blueprint(auth_bp)

    # Preflight OPTIONS is answered by Flask's automatic options handling
    @app.after_request
    def add_cors_headers(response):
        origin = _allowed_origin(app, request.headers.get("Origin"))
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    init_database(app)

    return app
