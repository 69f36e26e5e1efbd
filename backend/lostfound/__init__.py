from flask import Flask
from sqlalchemy import text
from dotenv import load_dotenv
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import get_config
from .errors import register_error_handlers
from .extensions import db, migrate, cors, cors_origins
from .logging_config import setup_logging


def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__)

    # Ensure .env is loaded before reading env vars
    load_dotenv()
    app.config.from_object(get_config(config_name))
    setup_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Honor proxy headers from Nginx for correct url_for(_external=True) scheme/host
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)  # type: ignore[assignment]

    # Init extensions
    cors.init_app(app, resources={r"*": {"origins": cors_origins()}})
    db.init_app(app)
    migrate.init_app(app, db)

    # Model registration for metadata / migrations
    from . import models  # noqa: F401

    register_error_handlers(app)

    # Register blueprints (v1 API)
    from .apis.v1 import register_api
    register_api(app)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/db-check")
    def db_check():
        try:
            db.session.execute(text("SELECT 1"))
            return {"db": "ok"}
        except Exception as e:
            app.logger.exception("Database check failed")
            return {"db": "error", "message": str(e)}, 500

    return app
