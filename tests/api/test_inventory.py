"""API tests for inventory endpoints."""

from httpx import AsyncClient


class TestInventoryAPI:
    async def test_create_item(self, api_client: AsyncClient, create_item):
        data = await create_item(name="Loratadine 10mg", price="4.50", tax_rate="0.05")

        assert data["id"] == 1
        assert data["price"] == "4.50"
        assert data["tax_rate"] == "0.05"
        assert data["discount_rate"] is None

    async def test_create_rejects_negative_price(self, api_client: AsyncClient):
        response = await api_client.post(
            "/api/inventory/items", json={"name": "Bad", "price": "-1"}
        )
        assert response.status_code == 400

    async def test_create_rejects_unpriceable_price(self, api_client: AsyncClient):
        response = await api_client.post(
            "/api/inventory/items", json={"name": "Bad", "price": "1e27", "quantity_on_hand": 5}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert (await api_client.get("/api/inventory/items")).json()["items"] == []

    async def test_largest_price_still_sells(self, api_client: AsyncClient, create_item):
        item = await create_item(price="9999999999.99", quantity_on_hand=5)

        response = await api_client.post(
            "/api/sales",
            json={"lines": [{"item_id": item["id"], "quantity": 5}], "payment_method": "CASH"},
            headers={"X-Staff-Id": "pharmacist-7"},
        )

        assert response.status_code == 201
        assert response.json()["grand_total"] == "49999999999.95"

    async def test_list_items(self, api_client: AsyncClient, create_item):
        await create_item(name="B")
        await create_item(name="A")

        response = await api_client.get("/api/inventory/items")

        assert response.status_code == 200
        assert [i["name"] for i in response.json()["items"]] == ["A", "B"]

    async def test_get_missing_item(self, api_client: AsyncClient):
        response = await api_client.get("/api/inventory/items/99")
        assert response.status_code == 404
        assert response.json()["error_code"] == "ITEM_NOT_FOUND"

    async def test_restock(self, api_client: AsyncClient, create_item):
        item = await create_item(quantity_on_hand=1)

        response = await api_client.post(
            f"/api/inventory/items/{item['id']}/restock", json={"quantity": 9}
        )

        assert response.status_code == 200
        assert response.json()["quantity_on_hand"] == 10

    async def test_restock_missing_item(self, api_client: AsyncClient):
        response = await api_client.post("/api/inventory/items/99/restock", json={"quantity": 1})
        assert response.status_code == 404

    async def test_restock_rejects_zero(self, api_client: AsyncClient, create_item):
        item = await create_item()
        response = await api_client.post(
            f"/api/inventory/items/{item['id']}/restock", json={"quantity": 0}
        )
        assert response.status_code == 400

    async def test_restock_rejects_quantity_beyond_sqlite_integer(
        self, api_client: AsyncClient, create_item
    ):
        item = await create_item()
        response = await api_client.post(
            f"/api/inventory/items/{item['id']}/restock", json={"quantity": 2**63}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
