# Overview: Flask API routes for the shared draft purchase slot.

from flask import Blueprint, jsonify, request

from ..services import draft_service
from ..validation import MissingFieldsError, ValidationError

drafts_bp = Blueprint("drafts", __name__, url_prefix="/purchase-details")


@drafts_bp.post("")
def save_draft_route():
    """Overwrite the draft with grams, quantity and totalCost."""
    payload = request.get_json(silent=True) or {}

    try:
        draft_service.save_draft(payload)
    except MissingFieldsError as e:
        return jsonify({
            "error": "Missing required fields: grams, quantity, totalCost",
            "missing": e.missing,
        }), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "Purchase details saved"}), 200


@drafts_bp.get("")
def read_draft_route():
    return jsonify(draft_service.read_draft()), 200
