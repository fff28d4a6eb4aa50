# Overview: Process-wide pending purchase slot used by multi-step checkout clients.

"""
Draft Purchase Slot

One slot per application process, shared by every caller. It is not keyed
by user or session and is never persisted:

- empty when the application is created
- save() replaces the whole draft; the previous one is gone (last writer wins)
- read() returns a copy and can be called any number of times

Do not turn this into a per-session store: clients rely on one caller
reading what another caller saved.
"""

from __future__ import annotations

import threading

from flask import current_app

from ..validation import parse_purchase_quantity, require_fields

DRAFT_FIELDS = ("grams", "quantity", "totalCost")
EXTENSION_KEY = "purchase_draft"


class PurchaseDraftSlot:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._draft: dict = {}

    def save(self, draft: dict) -> None:
        with self._lock:
            self._draft = dict(draft)

    def read(self) -> dict:
        with self._lock:
            return dict(self._draft)

    def clear(self) -> None:
        with self._lock:
            self._draft = {}


def init_app(app) -> PurchaseDraftSlot:
    slot = PurchaseDraftSlot()
    app.extensions[EXTENSION_KEY] = slot
    return slot


def get_slot() -> PurchaseDraftSlot:
    return current_app.extensions[EXTENSION_KEY]


def save_draft(payload: dict | None) -> dict:
    """
    Validate and store grams, quantity and totalCost as the current draft.

    Values are stored as sent; quantity must still be a whole number >= 1.

    Raises:
        MissingFieldsError: any field missing
        InvalidQuantityError: quantity not a whole number >= 1
    """
    fields = require_fields(payload, DRAFT_FIELDS, allow_falsy=("quantity",))
    parse_purchase_quantity(fields["quantity"])
    get_slot().save(fields)
    return fields


def read_draft() -> dict:
    """Current draft, or {} if nothing was saved since startup."""
    return get_slot().read()
