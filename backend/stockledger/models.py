# backend/stockledger/models.py
from __future__ import annotations

import enum

from .extensions import db


class Product(db.Model):
    """
    Catalog entry sized by weight.

    grams identifies the product for purchases; quantity is the stock count
    and is only lowered by the inventory ledger.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    grams = db.Column(db.Integer, nullable=False, unique=True, index=True)
    price = db.Column(db.Float, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Product id={self.id} grams={self.grams} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "grams": self.grams,
            "price": self.price,
            "quantity": self.quantity,
        }


class PurchaseRecordMixin:
    """
    Columns shared by both purchase logs.

    grams references Product.grams by value only. Rows are append-only.
    """
    id = db.Column(db.Integer, primary_key=True)
    grams = db.Column(db.Integer, nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    # Stored as sent (number or text) and listed back unchanged
    total_cost = db.Column("totalCost", db.JSON, nullable=False)
    purchase_date = db.Column("purchaseDate", db.Text, nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} grams={self.grams} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "grams": self.grams,
            "quantity": self.quantity,
            "totalCost": self.total_cost,
            "purchaseDate": self.purchase_date,
        }


class LettucePurchase(PurchaseRecordMixin, db.Model):
    __tablename__ = "purchases_lettuce"
    __table_args__ = {"sqlite_autoincrement": True}


class OtherPurchase(PurchaseRecordMixin, db.Model):
    __tablename__ = "purchases_other"
    __table_args__ = {"sqlite_autoincrement": True}


class Channel(str, enum.Enum):
    """Sales channel; each one owns a purchase log table."""
    LETTUCE = "lettuce"
    OTHER = "other"

    @property
    def model(self) -> type[PurchaseRecordMixin]:
        return PURCHASE_MODELS[self]

    @classmethod
    def from_name(cls, name: str) -> "Channel | None":
        try:
            return cls(name)
        except ValueError:
            return None


PURCHASE_MODELS: dict[Channel, type[PurchaseRecordMixin]] = {
    Channel.LETTUCE: LettucePurchase,
    Channel.OTHER: OtherPurchase,
}


USER_ROLES = ("user", "admin")


class User(db.Model):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, unique=True, index=True)
    # Plaintext or bcrypt hash depending on PASSWORD_SCHEME
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(16), nullable=False, default="user")

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
        }
