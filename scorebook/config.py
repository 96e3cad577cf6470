"""Centralized configuration for environment variables."""

import os

DATABASE_URL_ENV = "DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///scorebook.db"


def get_database_url() -> str:
    """Return the database URL, falling back to a local SQLite file."""
    return os.environ.get(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL


def load_config() -> dict:
    """Build the Flask config mapping from the environment."""
    return {
        "SQLALCHEMY_DATABASE_URI": get_database_url(),
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SECRET_KEY": os.environ.get("SECRET_KEY", "dev"),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "PORT": int(os.environ.get("PORT", 5000)),
    }
