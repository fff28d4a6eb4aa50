# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockledger/routes/auth.py
"""
Authentication API routes

Login answers with the user's role only; no token or session is issued.
"""

from flask import Blueprint, current_app, jsonify, request

from ..services import auth_service
from ..services.auth_service import DuplicateUsernameError, InvalidCredentialsError
from ..services.concurrency import StorageError
from ..validation import InvalidRoleError, MissingFieldsError

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user.

    Returns {"role": ...} on success, 401 on wrong username or password.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        role = auth_service.authenticate(data.get("username"), data.get("password"))

    except MissingFieldsError:
        return jsonify({"error": "Missing username or password"}), 400
    except InvalidCredentialsError as e:
        return jsonify({"error": str(e)}), 401
    except StorageError as e:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": f"Database error: {e}"}), 500

    return jsonify({"role": role}), 200


@auth_bp.post("/register")
def register_route():
    """
    Register a user with role "user" or "admin".

    Returns {"id", "message"}; 409 if the username is taken.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        user_id = auth_service.register_user(
            data.get("username"), data.get("password"), data.get("role"),
        )

    except MissingFieldsError:
        return jsonify({"error": "Missing required fields"}), 400
    except InvalidRoleError as e:
        return jsonify({"error": str(e)}), 400
    except DuplicateUsernameError as e:
        return jsonify({"error": str(e)}), 409
    except StorageError as e:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": f"Database error: {e}"}), 500

    return jsonify({"id": user_id, "message": "User registered successfully"}), 200
