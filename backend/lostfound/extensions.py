import os

from flask_cors import CORS
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Flask extension singletons, bound to the app in create_app()
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()

_DEV_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]


def cors_origins() -> list[str]:
    """Allowed browser origins from CORS_ALLOW_ORIGINS (comma-separated).

    Falls back to local dev servers outside production; production with no
    explicit list allows no cross-origin callers.
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if origins:
        return origins
    if os.getenv("FLASK_ENV", "development").lower() == "production":
        return []
    return list(_DEV_ORIGINS)
