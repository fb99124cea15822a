"""
API tests for the orders and stock items CSV exports.
Run from repository root: pytest backend/tests/test_api_export.py -v
"""
import csv
import io
from datetime import datetime, timedelta, timezone

import pytest


def _rows(resp):
    return list(csv.reader(io.StringIO(resp.text)))


def _days_ago(days):
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


async def _stock(client, name, **extra):
    resp = await client.post("/api/stock/items", json={
        "name": name, "quantity_available": 10, "price": "10.00", "cost": "4.00", **extra,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _order(client, items, **fields):
    resp = await client.post("/api/orders", json={"items": items, **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_order_export_follows_field_preferences(client):
    widget = await _stock(client, "Widget")
    await _order(
        client,
        [{"stock_item_id": widget["id"], "quantity": 2}],
        order_received_date=_days_ago(1),
        customer_name="Ann Lee",
        platform="Etsy",
        notes="Leave at door",
        attributes={"Gift note": "Wrap it"},
    )

    prefs = "/api/settings/field-preferences/order"
    assert (await client.put(f"{prefs}/fields/notes/visibility", json={"is_visible": False})).status_code == 200
    assert (await client.post(f"{prefs}/move", json={"from_index": 5, "to_index": 0})).status_code == 200
    assert (await client.post(f"{prefs}/custom-fields", json={"name": "Gift note"})).status_code == 201

    resp = await client.get("/api/orders/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"].startswith("attachment; filename=orders_")

    header, row = _rows(resp)
    assert header == [
        "Platform", "Order Date", "Order Reference", "Customer Name", "Order Status", "Items",
        "Shipping", "Selling Fees", "Additional Costs", "Completion Date", "Gift note", "Products",
    ]
    values = dict(zip(header, row))
    assert values["Platform"] == "Etsy"
    assert values["Customer Name"] == "Ann Lee"
    assert values["Order Reference"] == "N/A"
    assert values["Items"] == "1 items"
    assert values["Gift note"] == "Wrap it"
    assert values["Products"] == "Widget (x2)"


@pytest.mark.asyncio
async def test_order_export_date_ranges(client):
    await _order(client, [], order_received_date=_days_ago(5), customer_name="Recent")
    old = await _order(client, [], order_received_date=_days_ago(100), customer_name="Older")

    async def exported_customers(**params):
        resp = await client.get("/api/orders/export", params=params)
        assert resp.status_code == 200, resp.text
        header, *rows = _rows(resp)
        return [dict(zip(header, row))["Customer Name"] for row in rows]

    assert await exported_customers(range="last_30_days") == ["Recent"]
    assert await exported_customers(range="last_6_months") == ["Recent", "Older"]
    assert await exported_customers() == ["Recent", "Older"]

    old_day = old["order_received_date"][:10]
    assert await exported_customers(range="custom", start=old_day, end=old_day) == ["Older"]


@pytest.mark.asyncio
async def test_order_export_rejects_bad_custom_range(client):
    resp = await client.get("/api/orders/export", params={"range": "custom", "start": "2026-01-01"})
    assert resp.status_code == 400
    resp = await client.get("/api/orders/export", params={
        "range": "custom", "start": "2026-02-01", "end": "2026-01-01",
    })
    assert resp.status_code == 400
    resp = await client.get("/api/orders/export", params={"range": "last_week"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_stock_export_follows_field_preferences(client):
    category = (await client.post("/api/stock/categories", json={"name": "Kitchen"})).json()
    await _stock(client, "Mug", category_id=category["id"], attributes={"Colour": "Blue"})
    await _stock(client, "Plate", price="4.50")

    prefs = "/api/settings/field-preferences/stock"
    assert (await client.put(f"{prefs}/fields/cost/visibility", json={"is_visible": False})).status_code == 200
    assert (await client.post(f"{prefs}/custom-fields", json={"name": "Colour"})).status_code == 201

    resp = await client.get("/api/stock/items/export")
    assert resp.status_code == 200
    assert resp.headers["content-disposition"].startswith("attachment; filename=stock_items_")
    assert _rows(resp) == [
        ["Item Name", "Quantity Available", "Category", "Item Price", "Colour"],
        ["Mug", "10", "Kitchen", "10.00", "Blue"],
        ["Plate", "10", "Uncategorized", "4.50", ""],
    ]


@pytest.mark.asyncio
async def test_export_uses_sample_data_in_demo_mode(client, demo_data):
    demo_data.set_enabled(True)
    resp = await client.get("/api/stock/items/export")
    assert resp.status_code == 200
    assert len(_rows(resp)) == len(demo_data.sample.stock_items) + 1
