"""Tests for the order submission flow."""
from decimal import Decimal

import pytest

from restaurant.core.errors import PlatformError, ValidationError
from restaurant.schemas.order import CheckoutBody
from restaurant.services.cart import Cart, CartStore
from restaurant.services.orders import submit_order


@pytest.fixture
def cart() -> Cart:
    cart = Cart()
    cart.add("a", "Garlic Bread", 8.99)
    cart.add("b", "Ribeye Steak", 32.99, quantity=2, special_instructions="medium rare")
    return cart


def _written(db):
    return db.count("orders"), db.count("order_items"), db.count("payments")


class TestSubmitOrder:
    def test_takeaway_example(self, db, customer, cart):
        result = submit_order(db, customer, cart, CheckoutBody(order_type="takeaway", payment_method="cash"))

        order = result["order"]
        assert order["total_amount"] == pytest.approx(74.97)
        assert order["status"] == "pending"
        assert order["table_number"] is None
        assert order["customer_id"] == "cust-1"
        assert sorted(it["subtotal"] for it in result["items"]) == [8.99, 65.98]
        assert result["payment"]["amount"] == pytest.approx(74.97)
        assert result["payment"]["method"] == "cash"
        assert result["payment"]["status"] == "completed"
        assert _written(db) == (1, 2, 1)

    def test_totals_agree_across_records(self, db, customer, cart):
        submit_order(db, customer, cart, CheckoutBody(order_type="delivery"))

        (order,) = db.docs("orders").values()
        items = db.docs("order_items").values()
        (payment,) = db.docs("payments").values()
        items_total = sum(Decimal(str(it["subtotal"])) for it in items)
        assert Decimal(str(order["total_amount"])) == items_total == Decimal(str(payment["amount"]))

    def test_cents_are_stored_exactly(self, db, customer):
        cart = Cart()
        cart.add("x", "Lemonade", 0.1, quantity=3)
        cart.add("y", "Fries", 0.2)
        result = submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))

        (order,) = db.docs("orders").values()
        items = db.docs("order_items").values()
        (payment,) = db.docs("payments").values()
        assert sorted(it["subtotal_cents"] for it in items) == [20, 30]
        assert order["total_cents"] == payment["amount_cents"] == 50
        assert result["order"]["total_cents"] == result["payment"]["amount_cents"] == 50
        assert all(isinstance(it["subtotal_cents"], int) for it in items)

    def test_response_carries_server_timestamps(self, db, customer, cart):
        result = submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))

        stored = db.docs("orders")[result["order"]["id"]]
        assert result["order"]["created_at"] == stored["created_at"]
        assert result["payment"]["paid_at"] is not None

    def test_items_are_snapshots(self, db, customer, cart):
        submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))

        rows = {r["item_id"]: r for r in db.docs("order_items").values()}
        assert rows["b"]["item_name"] == "Ribeye Steak"
        assert rows["b"]["unit_price"] == 32.99
        assert rows["b"]["quantity"] == 2
        assert rows["b"]["special_instructions"] == "medium rare"
        assert rows["a"]["special_instructions"] is None

    def test_order_items_written_in_one_batch(self, db, customer, cart):
        submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))
        assert db.batch_commits == 1

    def test_cart_cleared_after_success(self, db, customer, cart):
        store = CartStore(db)
        store.save(customer.uid, cart)

        submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"), store=store)

        assert cart.is_empty()
        assert cart.total_amount == 0
        assert db.count("carts") == 0

    def test_dine_in_keeps_table_number(self, db, customer, cart):
        result = submit_order(db, customer, cart, CheckoutBody(order_type="dine-in", table_number=5))
        assert result["order"]["table_number"] == 5

    def test_non_dine_in_drops_table_number(self, db, customer, cart):
        result = submit_order(db, customer, cart, CheckoutBody(order_type="delivery", table_number=5))
        assert result["order"]["table_number"] is None

    def test_blank_notes_stored_as_none(self, db, customer, cart):
        result = submit_order(db, customer, cart, CheckoutBody(order_type="takeaway", notes="   "))
        assert result["order"]["notes"] is None


class TestValidation:
    @pytest.mark.parametrize("table_number", [None, 0, -3])
    def test_dine_in_requires_positive_table(self, db, customer, cart, table_number):
        with pytest.raises(ValidationError):
            submit_order(db, customer, cart, CheckoutBody(order_type="dine-in", table_number=table_number))
        assert _written(db) == (0, 0, 0)
        assert len(cart) == 2

    def test_empty_cart_rejected(self, db, customer):
        with pytest.raises(ValidationError, match="empty"):
            submit_order(db, customer, Cart(), CheckoutBody(order_type="takeaway"))
        assert _written(db) == (0, 0, 0)

    def test_anonymous_rejected(self, db, cart):
        with pytest.raises(ValidationError):
            submit_order(db, None, cart, CheckoutBody(order_type="takeaway"))
        assert _written(db) == (0, 0, 0)

    @pytest.mark.parametrize("field,value", [("order_type", "drive-thru"), ("payment_method", "iou")])
    def test_unknown_enumerations_rejected(self, db, customer, cart, field, value):
        body = CheckoutBody(**{"order_type": "takeaway", field: value})
        with pytest.raises(ValidationError):
            submit_order(db, customer, cart, body)
        assert _written(db) == (0, 0, 0)


class TestPartialFailure:
    def test_order_write_failure_writes_nothing(self, db, customer, cart):
        db.fail_writes_to.add("orders")
        with pytest.raises(PlatformError) as exc_info:
            submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))
        assert exc_info.value.step == "order"
        assert _written(db) == (0, 0, 0)
        assert len(cart) == 2

    def test_items_failure_leaves_order_in_place(self, db, customer, cart):
        db.fail_writes_to.add("order_items")
        with pytest.raises(PlatformError) as exc_info:
            submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))

        assert exc_info.value.step == "order_items"
        assert exc_info.value.order_id in db.docs("orders")
        assert _written(db) == (1, 0, 0)
        assert len(cart) == 2

    def test_payment_failure_leaves_order_and_items(self, db, customer, cart):
        store = CartStore(db)
        store.save(customer.uid, cart)
        db.fail_writes_to.add("payments")

        with pytest.raises(PlatformError) as exc_info:
            submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"), store=store)

        assert exc_info.value.step == "payment"
        assert _written(db) == (1, 2, 0)
        assert len(cart) == 2
        assert db.count("carts") == 1


class TestReadBackFailure:
    def test_failed_read_after_writes_still_returns_order(self, db, customer, cart):
        store = CartStore(db)
        store.save(customer.uid, cart)
        db.fail_reads_from.update({"orders", "payments"})

        result = submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"), store=store)

        assert _written(db) == (1, 2, 1)
        assert result["order"]["id"] in db.docs("orders")
        assert result["order"]["total_amount"] == pytest.approx(74.97)
        assert result["order"]["created_at"] is None
        assert result["payment"]["amount"] == pytest.approx(74.97)
        assert result["payment"]["paid_at"] is None
        assert len(result["order"]["items"]) == 2
        assert cart.is_empty()
        assert db.count("carts") == 0

    def test_response_ids_match_stored_records(self, db, customer, cart):
        db.fail_reads_from.add("payments")

        result = submit_order(db, customer, cart, CheckoutBody(order_type="takeaway"))

        assert set(db.docs("payments")) == {result["payment"]["id"]}
        assert {it["id"] for it in result["items"]} == set(db.docs("order_items"))
        assert result["payment"]["order_id"] == result["order"]["id"]


class TestCheckoutApi:
    def _fill_cart(self, client):
        assert client.post("/cart/items", json={"menu_item_id": "a"}).status_code == 200
        assert client.post("/cart/items", json={"menu_item_id": "b", "quantity": 2}).status_code == 200

    def test_place_order(self, client, session, customer, menu):
        session.login(customer)
        self._fill_cart(client)

        resp = client.post("/orders", json={"order_type": "takeaway", "payment_method": "card"})

        assert resp.status_code == 201
        body = resp.json()
        assert body["order"]["total_amount"] == pytest.approx(74.97)
        assert len(body["items"]) == 2
        assert body["payment"]["amount"] == pytest.approx(74.97)
        assert client.get("/cart").json()["items"] == []
        assert "cust-1" in menu.docs("customers")

    def test_dine_in_without_table_is_422(self, client, session, customer, menu):
        session.login(customer)
        self._fill_cart(client)

        resp = client.post("/orders", json={"order_type": "dine-in", "payment_method": "card"})

        assert resp.status_code == 422
        assert "table number" in resp.json()["detail"]
        assert menu.count("orders") == 0
        assert menu.count("customers") == 0
        assert len(client.get("/cart").json()["items"]) == 2

    def test_platform_failure_is_502_with_order_id(self, client, session, customer, menu):
        session.login(customer)
        self._fill_cart(client)
        menu.fail_writes_to.add("payments")

        resp = client.post("/orders", json={"order_type": "takeaway"})

        assert resp.status_code == 502
        assert resp.json()["order_id"] in menu.docs("orders")

    def test_failed_read_after_writes_is_201(self, client, session, customer, menu):
        session.login(customer)
        self._fill_cart(client)
        menu.fail_reads_from.add("payments")

        resp = client.post("/orders", json={"order_type": "takeaway"})

        assert resp.status_code == 201
        assert resp.json()["order"]["id"] in menu.docs("orders")
        assert resp.json()["payment"]["paid_at"] is None
        assert menu.count("payments") == 1

    def test_staff_cannot_place_orders(self, client, session, staff, menu):
        session.login(staff)
        resp = client.post("/orders", json={"order_type": "takeaway"})
        assert resp.status_code == 403
