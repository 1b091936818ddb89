# tests/api/test_products_api.py
"""
Tests for the product endpoints.
"""
import pytest

from catalog.db.repositories.product_repository import ProductRepository
from conftest import make_product


@pytest.fixture
def seeded(db_session):
    ProductRepository(db_session).bulk_insert(
        [
            make_product(sku="SAM-SMA-GALA-001", price=120000, stock=250),
            make_product(
                sku="APP-LAP-MACB-002",
                title="Apple MacBook Air",
                description="8 GB RAM, Apple M2 Processor, macOS",
                price=250000,
                category="Laptops",
                department="Computers",
                brand="Apple",
                stock=25,
                rating=4.8,
            ),
            make_product(
                sku="SON-CAM-A7IV-003",
                title="Sony Alpha 7 IV",
                price=400000,
                category="Cameras",
                department="Photography",
                brand="Sony",
                stock=22,
                rating=4.1,
            ),
        ]
    )
    return {p.sku: p.id for p in ProductRepository(db_session).list_by_filter({})}


class TestListProducts:
    def test_list_envelope(self, client, seeded):
        response = client.get("/products")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert len(body["data"]) == 3

    def test_filters(self, client, seeded):
        body = client.get("/products", params={"department": "Computers"}).json()
        assert [p["sku"] for p in body["data"]] == ["APP-LAP-MACB-002"]

        body = client.get("/products", params={"brand": "sony"}).json()
        assert [p["sku"] for p in body["data"]] == ["SON-CAM-A7IV-003"]

        body = client.get("/products", params={"min_price": 200000, "max_price": 300000}).json()
        assert [p["sku"] for p in body["data"]] == ["APP-LAP-MACB-002"]

    def test_pagination(self, client, seeded):
        body = client.get("/products", params={"skip": 1, "limit": 1}).json()
        assert body["count"] == 1
        assert body["total"] == 3
        assert body["data"][0]["sku"] == "APP-LAP-MACB-002"

    def test_invalid_price_filter(self, client, seeded):
        response = client.get("/products", params={"min_price": 500, "max_price": 100})
        assert response.status_code == 400

    def test_lookup_routes(self, client, seeded):
        assert client.get("/products/category/Cameras").json()["count"] == 1
        assert client.get("/products/department/Mobile Devices").json()["count"] == 1
        assert client.get("/products/brand/APPLE").json()["count"] == 1
        assert client.get("/products/price/100000/130000").json()["count"] == 1
        assert client.get("/products/price/500/100").status_code == 400

    def test_search(self, client, seeded):
        body = client.get("/products/search/macbook").json()
        assert [p["sku"] for p in body["data"]] == ["APP-LAP-MACB-002"]

        body = client.get("/products/search/M2 Processor").json()
        assert body["count"] == 1

        assert client.get("/products/search/nothing-like-this").json()["count"] == 0

    def test_low_stock(self, client, seeded):
        body = client.get("/products/inventory/low-stock").json()
        assert [p["sku"] for p in body["data"]] == ["SON-CAM-A7IV-003", "APP-LAP-MACB-002"]

        body = client.get("/products/inventory/low-stock", params={"threshold": 23}).json()
        assert [p["sku"] for p in body["data"]] == ["SON-CAM-A7IV-003"]

    def test_stats(self, client, seeded):
        body = client.get("/products/stats").json()
        stats = body["data"]

        assert stats["total_products"] == 3
        assert stats["active_products"] == 3
        assert stats["low_stock_products"] == 2
        assert stats["by_category"] == {"Cameras": 1, "Laptops": 1, "Smartphones": 1}
        assert stats["by_department"]["Photography"] == 1
        assert stats["average_price"] == pytest.approx(256666.67)

    def test_categories(self, client, seeded):
        body = client.get("/categories").json()
        assert body == {"success": True, "count": 3, "data": ["Cameras", "Laptops", "Smartphones"]}


class TestSingleProduct:
    def test_get_by_id_and_sku(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]

        body = client.get(f"/products/{product_id}").json()
        assert body["success"] is True
        assert body["data"]["title"] == "Samsung Galaxy S21"

        body = client.get("/products/sku/SAM-SMA-GALA-001").json()
        assert body["data"]["id"] == product_id

    def test_unknown_ids(self, client, seeded):
        assert client.get("/products/9999").status_code == 404
        assert client.get("/products/sku/NOPE").status_code == 404
        assert client.put("/products/9999", json={"title": "x"}).status_code == 404
        assert client.delete("/products/9999").status_code == 404
        assert client.delete("/products/9999/hard-delete").status_code == 404

    def test_create(self, client):
        response = client.post("/products", json=make_product(sku="NEW-SKU-001"))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] > 0
        assert data["sku"] == "NEW-SKU-001"
        assert data["currency"] == "DZD"

    def test_create_duplicate_sku(self, client, seeded):
        response = client.post("/products", json=make_product(sku="SAM-SMA-GALA-001"))
        assert response.status_code == 409

    @pytest.mark.parametrize(
        "overrides",
        [{"price": 0}, {"rating": 5.5}, {"stock": -1}, {"currency": "DINAR"}],
    )
    def test_create_validation(self, client, overrides):
        response = client.post("/products", json=make_product(sku="BAD-001", **overrides))
        assert response.status_code == 422

    def test_update(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]

        body = client.put(f"/products/{product_id}", json={"price": 110000}).json()

        assert body["data"]["price"] == 110000
        assert body["data"]["title"] == "Samsung Galaxy S21"

    @pytest.mark.parametrize("field", ["title", "price", "sku", "is_active"])
    def test_update_rejects_null_required_field(self, client, seeded, field):
        product_id = seeded["SAM-SMA-GALA-001"]

        response = client.put(f"/products/{product_id}", json={field: None})

        assert response.status_code == 422
        assert client.get(f"/products/{product_id}").json()["data"]["title"] == "Samsung Galaxy S21"

    def test_update_can_clear_description(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]

        body = client.put(f"/products/{product_id}", json={"description": None}).json()

        assert body["data"]["description"] is None

    def test_update_to_existing_sku(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]
        response = client.put(f"/products/{product_id}", json={"sku": "APP-LAP-MACB-002"})
        assert response.status_code == 409

    def test_update_stock(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]

        body = client.patch(f"/products/{product_id}/stock", json={"stock": 12}).json()
        assert body["data"]["stock"] == 12

        response = client.patch(f"/products/{product_id}/stock", json={"stock": -3})
        assert response.status_code == 422

    def test_soft_delete_and_restore(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]

        body = client.delete(f"/products/{product_id}").json()
        assert body["data"]["is_active"] is False
        assert client.get("/products").json()["count"] == 2
        assert client.get("/products", params={"include_inactive": True}).json()["count"] == 3

        body = client.patch(f"/products/{product_id}/restore").json()
        assert body["data"]["is_active"] is True
        assert client.get("/products").json()["count"] == 3

    def test_hard_delete(self, client, seeded):
        product_id = seeded["SAM-SMA-GALA-001"]

        response = client.delete(f"/products/{product_id}/hard-delete")

        assert response.status_code == 200
        assert client.get(f"/products/{product_id}").status_code == 404
