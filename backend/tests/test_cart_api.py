"""Tests for the cart endpoints."""


def test_add_and_total(client, session, customer, menu):
    session.login(customer)
    client.post("/cart/items", json={"menu_item_id": "a"})
    resp = client.post("/cart/items", json={"menu_item_id": "b", "quantity": 2})

    body = resp.json()
    assert body["total_amount"] == 74.97
    assert body["item_count"] == 3
    assert body["currency"] == "USD"
    assert {it["id"]: it["subtotal"] for it in body["items"]} == {"a": 8.99, "b": 65.98}


def test_add_twice_increments(client, session, customer, menu):
    session.login(customer)
    client.post("/cart/items", json={"menu_item_id": "a"})
    body = client.post("/cart/items", json={"menu_item_id": "a", "quantity": 2}).json()
    assert body["items"][0]["quantity"] == 3


def test_add_unknown_item_is_404(client, session, customer, menu):
    session.login(customer)
    assert client.post("/cart/items", json={"menu_item_id": "zzz"}).status_code == 404


def test_add_unavailable_item_is_422(client, session, customer, menu):
    session.login(customer)
    resp = client.post("/cart/items", json={"menu_item_id": "c"})
    assert resp.status_code == 422
    assert client.get("/cart").json()["items"] == []


def test_add_rejects_zero_quantity(client, session, customer, menu):
    session.login(customer)
    assert client.post("/cart/items", json={"menu_item_id": "a", "quantity": 0}).status_code == 422


def test_update_quantity_zero_removes(client, session, customer, menu):
    session.login(customer)
    client.post("/cart/items", json={"menu_item_id": "a"})
    client.post("/cart/items", json={"menu_item_id": "b"})

    body = client.patch("/cart/items/a", json={"quantity": 0}).json()

    assert [it["id"] for it in body["items"]] == ["b"]
    assert body["total_amount"] == 32.99


def test_remove_missing_line_is_ok(client, session, customer, menu):
    session.login(customer)
    resp = client.delete("/cart/items/ghost")
    assert resp.status_code == 200
    assert resp.json()["items"] == []


def test_clear(client, session, customer, menu):
    session.login(customer)
    client.post("/cart/items", json={"menu_item_id": "a"})
    assert client.delete("/cart").status_code == 204
    body = client.get("/cart").json()
    assert body["items"] == []
    assert body["total_amount"] == 0


def test_special_instructions_kept(client, session, customer, menu):
    session.login(customer)
    body = client.post("/cart/items", json={"menu_item_id": "b", "special_instructions": " well done "}).json()
    assert body["items"][0]["special_instructions"] == "well done"


def test_only_customers_have_carts(client, session, staff, menu):
    session.login(staff)
    assert client.get("/cart").status_code == 403
