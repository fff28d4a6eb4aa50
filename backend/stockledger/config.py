# backend/stockledger/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/stockledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///stockledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "*" mirrors any Origin header; otherwise a comma separated allowlist
    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "*")

    # "plaintext" keeps stored passwords readable and compares them verbatim.
    # "bcrypt" stores hashes instead; existing plaintext rows stop matching.
    PASSWORD_SCHEME = os.environ.get("PASSWORD_SCHEME", "plaintext")

    AUTO_CREATE_SCHEMA = _env_flag("AUTO_CREATE_SCHEMA", True)
    SEED_DEFAULT_USERS = _env_flag("SEED_DEFAULT_USERS", True)
