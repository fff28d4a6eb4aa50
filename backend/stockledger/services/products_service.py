# backend/stockledger/services/products_service.py
"""
Catalog Service

Products are keyed by grams for purchasing, so grams is unique across the
catalog. Writes are full replacements of grams, price and quantity; there
is no partial patch and no delete.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import Product
from ..validation import ConflictError, enforce_rules_product, require_fields
from .concurrency import StorageError, storage_errors

PRODUCT_FIELDS = ("grams", "price", "quantity")


class DuplicateGramsError(ConflictError):
    """Another product already uses this grams value."""

    def __init__(self, message: str = "A product with these grams already exists"):
        super().__init__(message)


def _validated_patch(payload: dict | None) -> dict:
    return enforce_rules_product(require_fields(payload, PRODUCT_FIELDS))


def _grams_taken(grams: int, exclude_id: int | None = None) -> bool:
    query = db.session.query(Product.id).filter(Product.grams == grams)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def _commit_catalog_write(grams: int, exclude_id: int | None = None) -> None:
    """Commit, reporting a unique-grams collision as DuplicateGramsError."""
    try:
        db.session.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent write of the same grams
        db.session.rollback()
        with storage_errors():
            taken = _grams_taken(grams, exclude_id)
        if taken:
            raise DuplicateGramsError() from exc
        raise StorageError.from_exc(exc) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError.from_exc(exc) from exc


def list_products() -> list[dict]:
    with storage_errors():
        products = db.session.query(Product).order_by(Product.id.asc()).all()
    return [p.to_dict() for p in products]


def get_product(product_id: int) -> dict | None:
    with storage_errors():
        p = db.session.get(Product, product_id)
    return p.to_dict() if p else None


def create_product(payload: dict | None) -> int:
    """
    Insert a product from grams, price and quantity.

    Raises:
        MissingFieldsError: any field missing or falsy
        ValidationError: non-numeric or out-of-range values
        DuplicateGramsError: grams already in the catalog
        StorageError: database failure

    Returns:
        New product id
    """
    patch = _validated_patch(payload)

    with storage_errors():
        if _grams_taken(patch["grams"]):
            raise DuplicateGramsError()

    p = Product(**patch)
    db.session.add(p)
    _commit_catalog_write(patch["grams"])
    product_id = p.id

    current_app.logger.info("Created product id=%s grams=%s", product_id, patch["grams"])
    return product_id


def update_product(product_id: int, payload: dict | None) -> int:
    """
    Replace grams, price and quantity of a product.

    Returns the number of rows changed: 1, or 0 when product_id is unknown.

    Raises:
        MissingFieldsError, ValidationError: bad input
        DuplicateGramsError: grams already used by another product
        StorageError: database failure
    """
    patch = _validated_patch(payload)

    with storage_errors():
        p = db.session.get(Product, product_id)
        if p is None:
            return 0

        if patch["grams"] != p.grams and _grams_taken(patch["grams"], exclude_id=p.id):
            raise DuplicateGramsError()

    for k, v in patch.items():
        setattr(p, k, v)
    _commit_catalog_write(patch["grams"], exclude_id=product_id)

    return 1
