"""
Purchase route tests.

Verifies the HTTP contract of /purchases_<channel>:
- 200 with the new id on success
- 400 for missing fields, invalid quantity and insufficient stock
- 404 for unknown products and unknown channels
- 500 with the database message when the transaction fails
"""

import pytest
from sqlalchemy.exc import OperationalError

from conftest import purchase_payload
from stockledger.services import ledger_service


@pytest.mark.parametrize("channel", ["lettuce", "other"])
class TestPurchaseRoutes:

    def test_record_purchase(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json=purchase_payload())
        assert resp.status_code == 200
        assert isinstance(resp.json["id"], int)

        listing = client.get(f"/purchases_{channel}")
        assert listing.status_code == 200
        assert listing.json == [{
            "id": resp.json["id"],
            "grams": 100,
            "quantity": 3,
            "totalCost": 15.0,
            "purchaseDate": "2024-01-01",
        }]

        products = client.get("/products").json
        assert products[0]["quantity"] == 7

    def test_missing_fields(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json={"grams": 100, "quantity": 1})
        assert resp.status_code == 400
        assert resp.json["error"] == "Missing required fields"
        assert sorted(resp.json["missing"]) == ["purchaseDate", "totalCost"]

    def test_empty_body(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}")
        assert resp.status_code == 400

    def test_free_text_total_cost(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json=purchase_payload(totalCost="fifteen"))
        assert resp.status_code == 200
        assert client.get(f"/purchases_{channel}").json[0]["totalCost"] == "fifteen"

    def test_zero_grams_is_missing(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json=purchase_payload(grams=0))
        assert resp.status_code == 400
        assert resp.json["missing"] == ["grams"]

    def test_invalid_quantity(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json=purchase_payload(quantity=0))
        assert resp.status_code == 400
        assert "quantity" in resp.json["error"]

    def test_product_not_found(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json=purchase_payload(grams=999))
        assert resp.status_code == 404
        assert resp.json["error"] == "Product not found"

    def test_insufficient_stock(self, client, product, channel):
        resp = client.post(f"/purchases_{channel}", json=purchase_payload(quantity=11))
        assert resp.status_code == 400
        assert resp.json == {"error": "Insufficient stock", "available": 10, "requested": 11}
        assert ledger_service.get_stock(100) == 10

    def test_storage_failure_returns_500(self, client, product, channel, monkeypatch):
        def broken_decrement(grams, quantity):
            raise OperationalError("UPDATE products", {}, Exception("database is locked"))

        monkeypatch.setattr(ledger_service, "_decrement_stock", broken_decrement)

        resp = client.post(f"/purchases_{channel}", json=purchase_payload())
        assert resp.status_code == 500
        assert resp.json["error"] == "Database error: database is locked"
        assert client.get(f"/purchases_{channel}").json == []


class TestUnknownChannel:

    def test_get_unknown_channel(self, client, db_session):
        assert client.get("/purchases_wholesale").status_code == 404

    def test_post_unknown_channel(self, client, product):
        resp = client.post("/purchases_wholesale", json=purchase_payload())
        assert resp.status_code == 404
        assert ledger_service.get_stock(100) == 10
