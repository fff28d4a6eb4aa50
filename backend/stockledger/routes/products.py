# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

# backend/stockledger/routes/products.py
"""
Catalog routes.

Writes take all of grams, price and quantity; a PUT replaces all three.
"""
from flask import Blueprint, current_app, jsonify, request

from ..services import products_service
from ..services.concurrency import StorageError
from ..validation import ConflictError, ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/products")


@products_bp.get("")
def list_products_route():
    """List every product in storage order."""
    try:
        return jsonify(products_service.list_products()), 200
    except StorageError as e:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": f"Database error: {e}"}), 500


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
    except StorageError as e:
        current_app.logger.exception("Failed to load product")
        return jsonify({"error": f"Database error: {e}"}), 500

    if product is None:
        return jsonify({"error": "Product not found"}), 404
    return jsonify(product), 200


@products_bp.post("")
def create_product_route():
    """
    Create a product.

    Body: grams, price, quantity (all required, non-zero).
    Returns {"id": <new id>}.
    """
    payload = request.get_json(silent=True) or {}

    try:
        product_id = products_service.create_product(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except StorageError as e:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": f"Database error: {e}"}), 500

    return jsonify({"id": product_id}), 200


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    """
    Replace a product's grams, price and quantity.

    Returns {"changes": 1}, or {"changes": 0} for an unknown id.
    """
    payload = request.get_json(silent=True) or {}

    try:
        changes = products_service.update_product(product_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except StorageError as e:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": f"Database error: {e}"}), 500

    return jsonify({"changes": changes}), 200
