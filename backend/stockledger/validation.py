from __future__ import annotations

from typing import Any, Iterable

from .models import USER_ROLES


class ValidationError(ValueError):
    """400-level input problem."""


class MissingFieldsError(ValidationError):
    """One or more required fields are absent or empty."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class InvalidQuantityError(ValidationError):
    """Quantity is not a whole number >= 1."""


class InvalidRoleError(ValidationError):
    """Role outside the allowed set."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate username)."""


def _is_missing(value: Any, allow_falsy: bool) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return not allow_falsy and not value


def require_fields(payload: dict | None, fields: Iterable[str], *, allow_falsy: Iterable[str] = ()) -> dict:
    """
    Return the named fields from payload, raising MissingFieldsError if any
    is absent.

    Falsy values (0, False, empty) count as absent. Fields named in
    allow_falsy are only absent when None or blank, so a purchase quantity
    of 0 reaches the quantity check instead.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    fields = list(fields)
    allow_falsy = set(allow_falsy)
    missing = [f for f in fields if _is_missing(payload.get(f), f in allow_falsy)]
    if missing:
        raise MissingFieldsError(missing)
    return {f: payload[f] for f in fields}


def coerce_int(name: str, value: Any) -> int:
    """
    Strict integer coercion.

    Accepts ints, integral floats and plain digit strings. Rejects bools,
    fractions, scientific notation and anything non-numeric.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{name} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if 'e' in stripped.lower() or '.' in stripped:
            raise ValidationError(f"{name} must be a plain integer")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{name} must be an integer")
    raise ValidationError(f"{name} must be an integer")


def coerce_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValidationError(f"{name} must be a number")
    raise ValidationError(f"{name} must be a number")


def parse_purchase_quantity(value: Any) -> int:
    """Quantity for purchases and drafts: a whole number >= 1."""
    try:
        qty = coerce_int("quantity", value)
    except ValidationError:
        raise InvalidQuantityError("quantity must be a whole number >= 1")
    if qty < 1:
        raise InvalidQuantityError("quantity must be a whole number >= 1")
    return qty


def enforce_rules_product(patch: dict) -> dict:
    """
    Normalize a product patch (grams, price, quantity).

    grams must be a positive integer, price a non-negative number and
    quantity a non-negative integer.
    """
    grams = coerce_int("grams", patch["grams"])
    if grams <= 0:
        raise ValidationError("grams must be > 0")

    price = coerce_float("price", patch["price"])
    if price < 0:
        raise ValidationError("price must be >= 0")

    quantity = coerce_int("quantity", patch["quantity"])
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")

    return {"grams": grams, "price": price, "quantity": quantity}


def enforce_rules_role(role: str) -> str:
    if role not in USER_ROLES:
        raise InvalidRoleError("Invalid role")
    return role
