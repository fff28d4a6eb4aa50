# Overview: Service-layer operations for the inventory ledger; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..models import Channel, Product, PurchaseRecordMixin
from ..validation import ValidationError, coerce_int, parse_purchase_quantity, require_fields
from .concurrency import atomic, lock_for_update, storage_errors

"""
Inventory Ledger Invariants (authoritative)

- A purchase record and its stock deduction commit together or not at all.
- Product.quantity never goes below zero.
- Validation failures are raised before any storage access and never retried.
- The stock check reads outside the transaction; the decrement re-checks
  inside it (quantity >= requested), so concurrent purchases cannot oversell.
"""

PURCHASE_FIELDS = ("grams", "quantity", "totalCost", "purchaseDate")


class LedgerError(Exception):
    """Raised for purchase rule violations."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ProductNotFoundError(LedgerError):
    def __init__(self, grams):
        super().__init__("Product not found", details={"grams": grams})
        self.grams = grams


class InsufficientStockError(LedgerError):
    def __init__(self, *, available: int, requested: int):
        super().__init__(
            "Insufficient stock",
            details={"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class _StockDrained(Exception):
    """The conditional decrement matched no row."""


def _resolve_channel(channel: Channel | str) -> Channel:
    if isinstance(channel, Channel):
        return channel
    resolved = Channel.from_name(channel)
    if resolved is None:
        raise ValueError(f"Unknown channel: {channel}")
    return resolved


def validate_purchase(payload: dict | None) -> dict:
    """
    Pure input checks, in order: presence of all fields, then quantity.

    Returns normalized values; never touches storage. grams is None when it
    is not an integer.
    """
    fields = require_fields(payload, PURCHASE_FIELDS, allow_falsy=("quantity",))
    quantity = parse_purchase_quantity(fields["quantity"])
    try:
        grams = coerce_int("grams", fields["grams"])
    except ValidationError:
        # No product can carry a non-integer weight
        grams = None
    return {
        "grams": grams,
        "quantity": quantity,
        "total_cost": fields["totalCost"],
        "purchase_date": str(fields["purchaseDate"]),
    }


def _decrement_stock(grams: int, quantity: int) -> int:
    """Conditional decrement; returns rows changed (0 when stock ran out)."""
    result = db.session.execute(
        update(Product)
        .where(Product.grams == grams, Product.quantity >= quantity)
        .values(quantity=Product.quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def get_stock(grams: int) -> int | None:
    with storage_errors():
        return db.session.query(Product.quantity).filter(Product.grams == grams).scalar()


def record_purchase(channel: Channel | str, payload: dict | None) -> int:
    """
    Append one purchase record to the channel's log and deduct stock.

    Raises:
        MissingFieldsError, InvalidQuantityError, ValidationError: bad input
        ProductNotFoundError: no product with the requested grams
        InsufficientStockError: stock lower than the requested quantity
        StorageError: database failure (transaction rolled back)

    Returns:
        The new purchase record id.
    """
    channel = _resolve_channel(channel)
    data = validate_purchase(payload)
    grams, quantity = data["grams"], data["quantity"]

    if grams is None:
        raise ProductNotFoundError(payload.get("grams"))

    with storage_errors():
        product = lock_for_update(
            db.session.query(Product).filter(Product.grams == grams)
        ).first()
    if product is None:
        raise ProductNotFoundError(grams)
    if product.quantity < quantity:
        raise InsufficientStockError(available=product.quantity, requested=quantity)

    model = channel.model
    try:
        with atomic():
            record = model(
                grams=grams,
                quantity=quantity,
                total_cost=data["total_cost"],
                purchase_date=data["purchase_date"],
            )
            db.session.add(record)
            db.session.flush()  # stage the insert before the decrement

            if _decrement_stock(grams, quantity) != 1:
                raise _StockDrained()
            record_id = record.id
    except _StockDrained:
        # Another purchase took the stock after the pre-check
        available = get_stock(grams) or 0
        current_app.logger.warning(
            "Purchase rolled back: stock for %sg changed to %s (requested %s)",
            grams, available, quantity,
        )
        raise InsufficientStockError(available=available, requested=quantity) from None

    current_app.logger.info(
        "Recorded %s purchase id=%s grams=%s quantity=%s",
        channel.value, record_id, grams, quantity,
    )
    return record_id


def list_purchases(channel: Channel | str) -> list[dict]:
    channel = _resolve_channel(channel)
    model: type[PurchaseRecordMixin] = channel.model
    with storage_errors():
        rows = db.session.query(model).order_by(model.id.asc()).all()
    return [r.to_dict() for r in rows]
