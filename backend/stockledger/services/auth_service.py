# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Login is an exact, case-sensitive match of username and password; the
result is the user's role. There are no sessions or tokens.

SECURITY NOTES:
- PASSWORD_SCHEME="plaintext" (default) stores passwords as supplied and
  compares them verbatim. Known weakness kept for compatibility with
  clients that rely on it.
- PASSWORD_SCHEME="bcrypt" stores bcrypt hashes (cost factor 12) and
  verifies with bcrypt.checkpw. Rows written under the other scheme do
  not match.
"""

import hmac

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import User
from ..validation import ConflictError, enforce_rules_role, require_fields
from .concurrency import StorageError, storage_errors

DEFAULT_USERS = (
    ("admin", "admin", "admin"),
    ("teofilo", "teofilo", "user"),
    ("daxton", "daxton", "user"),
    ("faith", "faith", "user"),
)


class InvalidCredentialsError(Exception):
    """Username/password pair does not match a stored user."""


class DuplicateUsernameError(ConflictError):
    """Username already taken."""


def _scheme() -> str:
    return current_app.config.get("PASSWORD_SCHEME", "plaintext")


def hash_password(password: str) -> str:
    """Encode a password for storage under the configured scheme."""
    if _scheme() == "bcrypt":
        salt = bcrypt.gensalt(rounds=12)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')
    return password


def verify_password(password: str, stored: str) -> bool:
    """
    Compare a candidate password with the stored value.

    Returns True on match, False otherwise (including malformed hashes).
    """
    if _scheme() == "bcrypt":
        try:
            return bcrypt.checkpw(password.encode('utf-8'), stored.encode('utf-8'))
        except ValueError:
            return False
    return hmac.compare_digest(password.encode('utf-8'), stored.encode('utf-8'))


def authenticate(username: str | None, password: str | None) -> str:
    """
    Authenticate user with username and password.

    Returns:
        The user's role

    Raises:
        MissingFieldsError: username or password missing
        InvalidCredentialsError: no user with that exact username/password
        StorageError: database failure
    """
    require_fields({"username": username, "password": password}, ("username", "password"))
    username, password = str(username), str(password)

    with storage_errors():
        user = db.session.query(User).filter(User.username == username).first()

    if user is None or not verify_password(password, user.password):
        raise InvalidCredentialsError("Invalid credentials")

    return user.role


def register_user(username: str | None, password: str | None, role: str | None) -> int:
    """
    Create a user with role "user" or "admin".

    Nothing is persisted when any check fails.

    Raises:
        MissingFieldsError: any field missing
        InvalidRoleError: role not in {user, admin}
        DuplicateUsernameError: username already exists
        StorageError: any other database failure

    Returns:
        New user id
    """
    require_fields(
        {"username": username, "password": password, "role": role},
        ("username", "password", "role"),
    )
    enforce_rules_role(role)
    username, password = str(username), str(password)

    with storage_errors():
        existing = db.session.query(User.id).filter(User.username == username).first()
    if existing:
        raise DuplicateUsernameError("Username already exists")

    user = User(username=username, password=hash_password(password), role=role)
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration
        db.session.rollback()
        with storage_errors():
            taken = db.session.query(User.id).filter(User.username == username).first()
        if taken:
            raise DuplicateUsernameError("Username already exists") from exc
        raise StorageError.from_exc(exc) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError.from_exc(exc) from exc

    user_id = user.id
    current_app.logger.info("Registered user %s (role=%s)", username, role)
    return user_id


def seed_default_users() -> int:
    """
    Insert the default accounts when the users table is empty.

    Returns the number of users inserted (0 if any user already exists).
    """
    with storage_errors():
        if db.session.query(User.id).first() is not None:
            return 0

        for username, password, role in DEFAULT_USERS:
            db.session.add(User(username=username, password=hash_password(password), role=role))
        db.session.commit()

    current_app.logger.info("Seeded %d default users", len(DEFAULT_USERS))
    return len(DEFAULT_USERS)
