"""
API tests for settings: field preferences, demo mode, sample data and templates.
Run from repository root: pytest backend/tests/test_api_settings.py -v
"""
import pytest

from app.services import app_settings


@pytest.mark.asyncio
async def test_field_preferences_default_document(client):
    resp = await client.get("/api/settings/field-preferences/stock")
    assert resp.status_code == 200
    body = resp.json()
    assert [item["builtInField"] for item in body["fieldItems"]] == [
        "name", "quantityAvailable", "category", "price", "cost",
    ]
    assert body["visibleFieldIds"] == ["name", "quantityAvailable", "category", "price", "cost"]

    resp = await client.get("/api/settings/field-preferences/widgets")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_custom_field_lifecycle(client):
    url = "/api/settings/field-preferences/order"
    resp = await client.post(f"{url}/custom-fields", json={"name": "Engraving", "placeholder": "Text"})
    assert resp.status_code == 201
    assert resp.json()["visibleFieldIds"][-1] == "custom_Engraving"

    resp = await client.post(f"{url}/custom-fields", json={"name": "Engraving"})
    assert resp.status_code == 409
    resp = await client.post(f"{url}/custom-fields", json={"name": ""})
    assert resp.status_code == 400

    resp = await client.post(f"{url}/move", json={"from_index": 11, "to_index": 0})
    assert resp.json()["visibleFieldIds"][0] == "custom_Engraving"
    resp = await client.post(f"{url}/move", json={"from_index": 0, "to_index": 12})
    assert resp.status_code == 400

    resp = await client.put(f"{url}/fields/notes/visibility", json={"is_visible": False})
    assert "notes" not in resp.json()["visibleFieldIds"]
    resp = await client.put(f"{url}/fields/orderStatus/visibility", json={"is_visible": False})
    assert resp.status_code == 400
    resp = await client.put(f"{url}/fields/custom_Missing/visibility", json={"is_visible": False})
    assert resp.status_code == 404

    resp = await client.delete(f"{url}/fields/custom_Engraving")
    body = resp.json()
    assert "custom_Engraving" not in body["visibleFieldIds"]
    assert [item["sortOrder"] for item in body["fieldItems"]] == list(range(11))
    assert (await client.delete(f"{url}/fields/custom_Engraving")).status_code == 404

    resp = await client.post(f"{url}/reset")
    assert "notes" in resp.json()["visibleFieldIds"]
    assert (await client.get(url)).json() == resp.json()


@pytest.mark.asyncio
async def test_replace_field_preferences_renumbers(client):
    document = {"fieldItems": [
        {"isBuiltIn": True, "builtInField": "cost", "isVisible": True, "sortOrder": 7},
        {"isBuiltIn": True, "builtInField": "name", "isVisible": False, "sortOrder": 2},
    ]}
    resp = await client.put("/api/settings/field-preferences/stock", json=document)
    assert resp.status_code == 200
    body = resp.json()
    assert [item["builtInField"] for item in body["fieldItems"]] == ["name", "cost"]
    assert [item["sortOrder"] for item in body["fieldItems"]] == [0, 1]
    # Name is required, so it stays visible
    assert body["visibleFieldIds"] == ["name", "cost"]

    resp = await client.put("/api/settings/field-preferences/stock",
                            json={"fieldItems": [{"isBuiltIn": True, "builtInField": "nope"}]})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_demo_mode_switches_listings(client, db, demo_data):
    assert (await client.get("/api/settings/demo-mode")).json() == {"enabled": False}
    assert (await client.get("/api/orders")).json() == []

    resp = await client.put("/api/settings/demo-mode", json={"enabled": True})
    assert resp.json() == {"enabled": True}
    assert demo_data.is_enabled
    assert await app_settings.get_demo_mode(db) is True

    orders = (await client.get("/api/orders")).json()
    assert len(orders) == 108
    stock = (await client.get("/api/stock/items")).json()
    assert len(stock) == 50
    assert len((await client.get("/api/stock/categories")).json()) == 10

    resp = await client.get(f"/api/orders/{orders[0]['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == orders[0]["id"]

    await client.put("/api/settings/demo-mode", json={"enabled": False})
    assert (await client.get("/api/orders")).json() == []


@pytest.mark.asyncio
async def test_load_sample_data_persists_rows(client, demo_data):
    resp = await client.post("/api/settings/sample-data/load")
    assert resp.json() == {"categories": 10, "stock_items": 50, "orders": 108}
    assert not demo_data.is_enabled

    assert len((await client.get("/api/stock/items")).json()) == 50
    assert len((await client.get("/api/orders")).json()) == 108


@pytest.mark.asyncio
async def test_enabled_statuses_and_platforms(client):
    statuses = (await client.get("/api/settings/order-statuses")).json()["statuses"]
    assert statuses[0] == "received"
    assert len(statuses) == 11

    resp = await client.put("/api/settings/order-statuses", json={"statuses": ["fulfilled", "received"]})
    assert resp.json() == {"statuses": ["received", "fulfilled"]}
    resp = await client.put("/api/settings/order-statuses", json={"statuses": []})
    assert resp.status_code == 400

    resp = await client.put("/api/settings/platforms", json={"platforms": ["Vinted", "eBay"]})
    assert resp.json() == {"platforms": ["eBay", "Vinted"]}
    resp = await client.put("/api/settings/platforms", json={"platforms": []})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_attribute_template_single_default_per_type(client):
    url = "/api/settings/attribute-templates"
    first = (await client.post(url, json={
        "name": "Shoes", "template_type": "Stock Item", "attributes": {"Size": "9"}, "is_default": True,
    })).json()
    order_default = (await client.post(url, json={
        "name": "Gift", "template_type": "Order", "is_default": True,
    })).json()
    second = (await client.post(url, json={
        "name": "Shirts", "template_type": "Stock Item", "is_default": True,
    })).json()

    templates = {t["id"]: t for t in (await client.get(url)).json()}
    assert templates[first["id"]]["is_default"] is False
    assert templates[second["id"]]["is_default"] is True
    assert templates[order_default["id"]]["is_default"] is True

    resp = await client.get(url, params={"template_type": "Order"})
    assert [t["name"] for t in resp.json()] == ["Gift"]

    resp = await client.put(f"{url}/{first['id']}", json={"attributes": {"Size": "10"}})
    assert resp.json()["attributes"] == {"Size": "10"}
    assert (await client.delete(f"{url}/{first['id']}")).status_code == 204
    assert (await client.delete(f"{url}/{first['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_order_template_single_default(client):
    url = "/api/settings/order-templates"
    first = (await client.post(url, json={"name": "Etsy", "platform": "Etsy", "is_default": True})).json()
    assert first["status"] == "received"
    second = (await client.post(url, json={"name": "Car boot", "platform": "Carboot Sale"})).json()

    await client.put(f"{url}/{second['id']}", json={"is_default": True})
    templates = {t["name"]: t for t in (await client.get(url)).json()}
    assert templates["Etsy"]["is_default"] is False
    assert templates["Car boot"]["is_default"] is True

    assert (await client.put(f"{url}/00000000-0000-0000-0000-000000000001", json={})).status_code == 404
