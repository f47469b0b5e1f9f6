from __future__ import annotations

import pytest


ITEMS = [
    {"description": "Toughened 8mm", "quantity": 10, "unit": "sq ft", "rate": 50},
    {"description": "Edge polish", "quantity": 2, "unit": "rft", "rate": 25.5},
]


@pytest.fixture
def other_headers(register, login):
    register(email="other@example.com")
    r = login(email="other@example.com", device_id="other-laptop")
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def customer(client, auth_headers):
    r = client.post(
        "/customer",
        headers=auth_headers,
        json={"name": "Sharma Interiors", "phone": "98765", "gst": "29ABCDE1234F1Z5"},
    )
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def invoice(client, auth_headers, customer):
    r = client.post(
        "/invoice",
        headers=auth_headers,
        json={"customer_id": customer["id"], "items": ITEMS, "discount": 10, "status": "sent"},
    )
    assert r.status_code == 201, r.text
    return r.json()


def _pay(client, headers, invoice_id, amount, **fields):
    r = client.post("/payment", headers=headers, json={"invoice_id": invoice_id, "amount": amount, **fields})
    assert r.status_code == 201, r.text
    return r.json()


# ---------------------------------------------------------------------------
# Customer / Product
# ---------------------------------------------------------------------------

def test_customer_crud(client, auth_headers, customer):
    r = client.get(f"/customer/{customer['id']}", headers=auth_headers)
    assert r.json()["name"] == "Sharma Interiors"

    r = client.put(f"/customer/{customer['id']}", headers=auth_headers, json={"phone": "11111"})
    assert r.status_code == 200
    assert r.json()["phone"] == "11111"
    assert r.json()["name"] == "Sharma Interiors"

    client.post("/customer", headers=auth_headers, json={"name": "Arora Builders"})
    r = client.get("/customer/list", headers=auth_headers)
    assert r.json()["total"] == 2
    assert [c["name"] for c in r.json()["items"]] == ["Arora Builders", "Sharma Interiors"]

    assert client.delete(f"/customer/{customer['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/customer/{customer['id']}", headers=auth_headers).status_code == 404


def test_customer_name_required(client, auth_headers):
    r = client.post("/customer", headers=auth_headers, json={"name": "   "})
    assert r.status_code == 422


def test_customer_of_other_account_is_hidden(client, customer, other_headers):
    r = client.get(f"/customer/{customer['id']}", headers=other_headers)
    assert r.status_code == 404
    assert client.get("/customer/list", headers=other_headers).json()["total"] == 0


def test_customer_with_invoice_cannot_be_deleted(client, auth_headers, customer, invoice):
    r = client.delete(f"/customer/{customer['id']}", headers=auth_headers)
    assert r.status_code == 409


def test_product_crud(client, auth_headers):
    r = client.post(
        "/product",
        headers=auth_headers,
        json={"name": "Frosted glass", "category": "Decorative", "thickness": "5mm", "price": 85},
    )
    assert r.status_code == 201
    product = r.json()
    assert product["unit"] == "sq ft"

    r = client.put(f"/product/{product['id']}", headers=auth_headers, json={"price": 90})
    assert r.json()["price"] == 90

    assert client.get("/product/list", headers=auth_headers).json()["total"] == 1
    assert client.delete(f"/product/{product['id']}", headers=auth_headers).status_code == 204
    assert client.get("/product/list", headers=auth_headers).json()["total"] == 0


def test_product_price_not_negative(client, auth_headers):
    r = client.post("/product", headers=auth_headers, json={"name": "Mirror", "price": -1})
    assert r.status_code == 422


def test_catalog_requires_token(client):
    assert client.get("/customer/list").status_code == 401
    assert client.get("/invoice/list").status_code == 401


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------

def test_invoice_totals_are_computed(invoice, customer):
    assert invoice["subtotal"] == 551.0
    assert invoice["tax_rate"] == 18
    assert invoice["tax"] == 99.18
    assert invoice["total"] == 640.18
    assert invoice["paid"] == 0
    assert invoice["balance"] == 640.18
    assert invoice["status"] == "sent"
    assert invoice["items"][0]["amount"] == 500.0
    assert invoice["customer_snapshot"]["name"] == customer["name"]


def test_invoice_ignores_client_totals(client, auth_headers, customer):
    r = client.post(
        "/invoice",
        headers=auth_headers,
        json={"customer_id": customer["id"], "items": [{"quantity": 1, "rate": 100, "amount": 1}], "total": 5},
    )
    assert r.json()["total"] == 118.0
    assert r.json()["status"] == "draft"


def test_invoice_uses_company_tax_rate(client, auth_headers, customer):
    client.put("/settings", headers=auth_headers, json={"tax_rate": 12})
    r = client.post("/invoice", headers=auth_headers, json={"customer_id": customer["id"], "items": ITEMS})
    assert r.json()["tax_rate"] == 12
    assert r.json()["tax"] == 66.12


def test_invoice_for_foreign_customer(client, customer, other_headers):
    r = client.post("/invoice", headers=other_headers, json={"customer_id": customer["id"], "items": ITEMS})
    assert r.status_code == 404


def test_invoice_snapshot_survives_customer_edit(client, auth_headers, customer, invoice):
    client.put(f"/customer/{customer['id']}", headers=auth_headers, json={"name": "Renamed Interiors"})
    r = client.get(f"/invoice/{invoice['id']}", headers=auth_headers)
    assert r.json()["customer_snapshot"]["name"] == "Sharma Interiors"


def test_invoice_update_recomputes(client, auth_headers, invoice):
    _pay(client, auth_headers, invoice["id"], 100)
    r = client.put(
        f"/invoice/{invoice['id']}",
        headers=auth_headers,
        json={"items": [{"description": "Mirror", "quantity": 1, "rate": 100}], "discount": 0, "tax_rate": 0},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 100
    assert data["paid"] == 100
    assert data["balance"] == 0
    assert data["status"] == "paid"


def test_invoice_list_newest_first(client, auth_headers, customer, invoice):
    second = client.post("/invoice", headers=auth_headers, json={"customer_id": customer["id"], "items": ITEMS}).json()
    r = client.get("/invoice/list", headers=auth_headers)
    assert r.json()["total"] == 2
    assert [i["id"] for i in r.json()["items"]] == [second["id"], invoice["id"]]


def test_invoice_delete_removes_payments(client, auth_headers, invoice):
    _pay(client, auth_headers, invoice["id"], 50)
    assert client.delete(f"/invoice/{invoice['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/invoice/{invoice['id']}", headers=auth_headers).status_code == 404
    assert client.get("/payment/list", headers=auth_headers).json()["total"] == 0


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------

def test_payments_settle_invoice(client, auth_headers, invoice):
    _pay(client, auth_headers, invoice["id"], 200, payment_method="upi", reference_number="UPI-1")
    r = client.get(f"/invoice/{invoice['id']}", headers=auth_headers)
    assert r.json()["paid"] == 200
    assert r.json()["balance"] == 440.18
    assert r.json()["status"] == "partial"

    last = _pay(client, auth_headers, invoice["id"], 440.18)
    r = client.get(f"/invoice/{invoice['id']}", headers=auth_headers)
    assert r.json()["balance"] == 0
    assert r.json()["status"] == "paid"

    assert client.delete(f"/payment/{last['id']}", headers=auth_headers).status_code == 204
    r = client.get(f"/invoice/{invoice['id']}", headers=auth_headers)
    assert r.json()["paid"] == 200
    assert r.json()["status"] == "partial"


def test_payment_list_filter(client, auth_headers, customer, invoice):
    other = client.post("/invoice", headers=auth_headers, json={"customer_id": customer["id"], "items": ITEMS}).json()
    _pay(client, auth_headers, invoice["id"], 10)
    _pay(client, auth_headers, other["id"], 20)

    assert client.get("/payment/list", headers=auth_headers).json()["total"] == 2
    r = client.get("/payment/list", headers=auth_headers, params={"invoice_id": other["id"]})
    assert [p["amount"] for p in r.json()["items"]] == [20]


def test_payment_amount_must_be_positive(client, auth_headers, invoice):
    r = client.post("/payment", headers=auth_headers, json={"invoice_id": invoice["id"], "amount": 0})
    assert r.status_code == 422


def test_payment_on_foreign_invoice(client, invoice, other_headers):
    r = client.post("/payment", headers=other_headers, json={"invoice_id": invoice["id"], "amount": 5})
    assert r.status_code == 404


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_settings_seeded_from_profile(client, register, login):
    register(company_name="Clear Glass Works", phone="12345")
    headers = {"Authorization": f"Bearer {login(device_id='phone-a').json()['access_token']}"}
    r = client.get("/settings", headers=headers)
    assert r.status_code == 200
    data = r.json()
    assert data["company_name"] == "Clear Glass Works"
    assert data["company_phone"] == "12345"
    assert data["company_email"] == "owner@example.com"
    assert data["tax_rate"] == 18
    assert data["currency"] == "₹"


def test_settings_update(client, auth_headers):
    r = client.put("/settings", headers=auth_headers, json={"company_gst": "29XYZ", "tax_rate": 5})
    assert r.status_code == 200
    assert r.json()["company_gst"] == "29XYZ"
    assert client.get("/settings", headers=auth_headers).json()["tax_rate"] == 5


def test_settings_tax_rate_range(client, auth_headers):
    r = client.put("/settings", headers=auth_headers, json={"tax_rate": 150})
    assert r.status_code == 422


# ---------------------------------------------------------------------------
# Quotation / Order
# ---------------------------------------------------------------------------

def test_quotation_crud(client, auth_headers, customer):
    r = client.post(
        "/quotation",
        headers=auth_headers,
        json={"customer_id": customer["id"], "items": ITEMS, "valid_until": "2026-12-31T00:00:00Z"},
    )
    assert r.status_code == 201, r.text
    quotation = r.json()
    assert quotation["quotation_number"] == "QT0001"
    assert quotation["status"] == "draft"
    assert quotation["subtotal"] == 551.0
    assert quotation["tax"] == 99.18
    assert quotation["total"] == 650.18
    assert quotation["customer_snapshot"]["gst"] == "29ABCDE1234F1Z5"

    second = client.post("/quotation", headers=auth_headers, json={"customer_id": customer["id"]}).json()
    assert second["quotation_number"] == "QT0002"
    assert second["total"] == 0

    r = client.put(
        f"/quotation/{quotation['id']}",
        headers=auth_headers,
        json={"status": "accepted", "items": [{"description": "Mirror", "quantity": 1, "rate": 100}]},
    )
    assert r.status_code == 200
    assert r.json()["status"] == "accepted"
    assert r.json()["total"] == 118.0

    r = client.get("/quotation/list", headers=auth_headers)
    assert [q["id"] for q in r.json()["items"]] == [second["id"], quotation["id"]]

    assert client.delete(f"/quotation/{quotation['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/quotation/{quotation['id']}", headers=auth_headers).status_code == 404


def test_quotation_status_is_checked(client, auth_headers, customer):
    r = client.post("/quotation", headers=auth_headers, json={"customer_id": customer["id"], "status": "paid"})
    assert r.status_code == 422


def test_quotation_of_other_account_is_hidden(client, auth_headers, customer, other_headers):
    quotation = client.post("/quotation", headers=auth_headers, json={"customer_id": customer["id"]}).json()
    assert client.get(f"/quotation/{quotation['id']}", headers=other_headers).status_code == 404
    r = client.post("/quotation", headers=other_headers, json={"customer_id": customer["id"]})
    assert r.status_code == 404


def test_order_crud_and_status_filter(client, auth_headers, customer):
    client.put("/settings", headers=auth_headers, json={"tax_rate": 12})
    r = client.post("/order", headers=auth_headers, json={"customer_id": customer["id"], "items": ITEMS})
    assert r.status_code == 201, r.text
    order = r.json()
    assert order["order_number"] == "ORD0001"
    assert order["status"] == "pending"
    assert order["tax_rate"] == 12
    assert order["total"] == 617.12

    done = client.post(
        "/order", headers=auth_headers, json={"customer_id": customer["id"], "status": "completed"}
    ).json()
    assert done["order_number"] == "ORD0002"

    r = client.get("/order/list", headers=auth_headers, params={"status": "completed"})
    assert [o["id"] for o in r.json()["items"]] == [done["id"]]
    assert client.get("/order/list", headers=auth_headers).json()["total"] == 2

    r = client.put(f"/order/{order['id']}", headers=auth_headers, json={"status": "processing", "notes": "cut today"})
    assert r.json()["status"] == "processing"
    assert r.json()["notes"] == "cut today"
    assert r.json()["total"] == 617.12

    assert client.delete(f"/order/{order['id']}", headers=auth_headers).status_code == 204
    assert client.get("/order/list", headers=auth_headers).json()["total"] == 1


def test_order_numbers_are_per_account(client, auth_headers, customer, other_headers):
    client.post("/order", headers=auth_headers, json={"customer_id": customer["id"]})
    other_customer = client.post("/customer", headers=other_headers, json={"name": "Mehta Glass"}).json()
    r = client.post("/order", headers=other_headers, json={"customer_id": other_customer["id"]})
    assert r.json()["order_number"] == "ORD0001"


def test_customer_with_order_cannot_be_deleted(client, auth_headers, customer):
    client.post("/order", headers=auth_headers, json={"customer_id": customer["id"]})
    assert client.delete(f"/customer/{customer['id']}", headers=auth_headers).status_code == 409
