# Overview: Flask API routes for channel purchases; parses input and returns JSON responses.

# backend/stockledger/routes/purchases.py
"""
Purchase routes, one pair per sales channel:

    GET  /purchases_<channel>   list the channel's purchase log
    POST /purchases_<channel>   record a purchase and deduct stock

Unknown channel names do not match the rule and return 404.
"""

from flask import Blueprint, current_app, jsonify, request

from ..models import Channel
from ..services import ledger_service
from ..services.concurrency import StorageError
from ..services.ledger_service import InsufficientStockError, ProductNotFoundError
from ..validation import MissingFieldsError, ValidationError

purchases_bp = Blueprint("purchases", __name__)

CHANNEL_RULE = "/purchases_<any({}):channel>".format(", ".join(c.value for c in Channel))


@purchases_bp.get(CHANNEL_RULE)
def list_purchases_route(channel: str):
    try:
        return jsonify(ledger_service.list_purchases(Channel(channel))), 200
    except StorageError as e:
        current_app.logger.exception("Failed to list %s purchases", channel)
        return jsonify({"error": f"Database error: {e}"}), 500


@purchases_bp.post(CHANNEL_RULE)
def record_purchase_route(channel: str):
    """
    Record a purchase.

    Body: grams, quantity, totalCost, purchaseDate.
    Returns {"id": <purchase id>}.
    """
    payload = request.get_json(silent=True) or {}

    try:
        purchase_id = ledger_service.record_purchase(Channel(channel), payload)

    except MissingFieldsError as e:
        return jsonify({"error": "Missing required fields", "missing": e.missing}), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), **e.details}), 400
    except StorageError as e:
        current_app.logger.exception("Purchase transaction failed")
        return jsonify({"error": f"Database error: {e}"}), 500
    except Exception:
        current_app.logger.exception("Failed to record purchase")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"id": purchase_id}), 200
