from decimal import Decimal

import pytest

from storefront.errors import BadRequest, InsufficientStock, NotFound, OutOfStock
from storefront.model import CartItem
from storefront.services import cart_service


def test_add_item_merges_lines(user, make_product):
    p = make_product(stock=5)
    cart_service.add_item(user.id, p.id, 2)
    item = cart_service.add_item(user.id, str(p.id), 1)

    assert item.quantity == 3
    assert CartItem.query.filter_by(user_id=user.id).count() == 1


def test_add_item_never_exceeds_stock(user, make_product):
    p = make_product(stock=3)
    cart_service.add_item(user.id, p.id, 2)

    with pytest.raises(OutOfStock):
        cart_service.add_item(user.id, p.id, 2)

    assert CartItem.query.filter_by(user_id=user.id).one().quantity == 2


def test_out_of_stock_is_a_bad_request(user, make_product):
    p = make_product(stock=0)
    with pytest.raises(BadRequest):
        cart_service.add_item(user.id, p.id, 1)


def test_untracked_product_ignores_stock(user, make_product):
    p = make_product(stock=0, track_quantity=False)
    assert cart_service.add_item(user.id, p.id, 4).quantity == 4


def test_add_item_caps_line_quantity(user, make_product):
    p = make_product(stock=500)
    with pytest.raises(BadRequest):
        cart_service.add_item(user.id, p.id, 100)


def test_add_inactive_or_missing_product(user, make_product):
    p = make_product(active=False)
    with pytest.raises(NotFound):
        cart_service.add_item(user.id, p.id, 1)
    with pytest.raises(NotFound):
        cart_service.add_item(user.id, "6f1c1f7e-0000-4000-8000-000000000000", 1)


def test_add_item_rejects_bad_quantity(user, make_product):
    p = make_product()
    with pytest.raises(BadRequest):
        cart_service.add_item(user.id, p.id, 0)
    with pytest.raises(BadRequest):
        cart_service.add_item(user.id, p.id, "two")


def test_update_quantity_checks_stock(user, make_product):
    p = make_product(stock=1)
    item = cart_service.add_item(user.id, p.id, 1)

    with pytest.raises(InsufficientStock):
        cart_service.update_quantity(user.id, item.id, 2)

    assert cart_service.update_quantity(user.id, item.id, 1).quantity == 1


def test_update_quantity_zero_removes_line(user, make_product):
    p = make_product()
    item = cart_service.add_item(user.id, p.id, 2)

    assert cart_service.update_quantity(user.id, item.id, 0) is None
    assert cart_service.get_items(user.id) == []


def test_cart_lines_are_private(make_user, make_product):
    owner, other = make_user(), make_user()
    item = cart_service.add_item(owner.id, make_product().id, 1)

    with pytest.raises(NotFound):
        cart_service.update_quantity(other.id, item.id, 2)
    with pytest.raises(NotFound):
        cart_service.remove_item(other.id, item.id)


def test_clear_is_idempotent(user, make_product):
    cart_service.add_item(user.id, make_product().id, 1)

    cart_service.clear(user.id)
    cart_service.clear(user.id)

    assert cart_service.get_items(user.id) == []


def test_summary(user, make_product):
    a = make_product(price="100.00", original_price="120.00")
    b = make_product(price="19.99")
    cart_service.add_item(user.id, a.id, 2)
    cart_service.add_item(user.id, b.id, 3)

    s = cart_service.summary(user.id)

    assert s == {"item_count": 5, "subtotal": "259.97", "savings": "40.00"}


def test_quote_adds_shipping_and_tax_below_threshold(user, make_product):
    cart_service.add_item(user.id, make_product(price="100.00").id, 2)

    q = cart_service.quote(user.id)

    assert q["subtotal"] == "200.00"
    assert q["shipping"] == "50.00"
    assert q["tax"] == "36.00"
    assert q["total"] == "286.00"
    assert q["coupon"] is None


def test_quote_with_coupon_and_free_shipping(user, make_product, db):
    from storefront.services.coupon_service import create_coupon

    create_coupon("SAVE10", "percentage", "10")
    cart_service.add_item(user.id, make_product(price="250.00").id, 4)

    q = cart_service.quote(user.id, "save10")

    assert q["discount"] == "100.00"
    assert q["shipping"] == "0.00"
    assert Decimal(q["tax"]) == Decimal("162.00")
    assert q["total"] == "1062.00"
    assert q["coupon"]["code"] == "SAVE10"


def test_quote_on_empty_cart_is_zero(user):
    q = cart_service.quote(user.id)
    assert q["total"] == "0.00"
    assert q["shipping"] == "0.00"


def test_cart_http_flow(client, user, make_product, auth_headers):
    p = make_product(stock=2)
    h = auth_headers(user)

    r = client.post("/api/cart/items", json={"product_id": str(p.id), "quantity": 2}, headers=h)
    assert r.status_code == 201
    item_id = r.get_json()["data"]["item"]["id"]

    r = client.post("/api/cart/items", json={"product_id": str(p.id), "quantity": 1}, headers=h)
    assert r.status_code == 400
    body = r.get_json()
    assert body["status"] is False
    assert body["data"]["code"] == "BAD_REQUEST"

    r = client.patch(f"/api/cart/items/{item_id}", json={"quantity": 1}, headers=h)
    assert r.get_json()["data"]["item"]["quantity"] == 1

    r = client.get("/api/cart", headers=h)
    assert r.get_json()["data"]["summary"]["item_count"] == 1

    assert client.delete("/api/cart", headers=h).status_code == 200
    assert client.get("/api/cart/summary", headers=h).get_json()["data"]["item_count"] == 0


def test_cart_requires_login(client):
    r = client.get("/api/cart")
    assert r.status_code == 401
    assert r.get_json()["data"]["code"] == "UNAUTHORIZED"


def test_raising_b_above_its_stock_fails(user, make_product):
    a = make_product(price="500.00", stock=10)
    b = make_product(price="250.00", stock=1)
    cart_service.add_item(user.id, a.id, 1)
    line_b = cart_service.add_item(user.id, b.id, 1)

    with pytest.raises(BadRequest):
        cart_service.update_quantity(user.id, line_b.id, 2)

    assert cart_service.summary(user.id)["subtotal"] == "750.00"


def test_summary_skips_deleted_products(db, user, make_product):
    keep = make_product(price="30.00")
    gone = make_product(price="70.00")
    cart_service.add_item(user.id, keep.id, 1)
    cart_service.add_item(user.id, gone.id, 2)

    db.session.delete(gone)
    db.session.commit()

    assert cart_service.summary(user.id) == {"item_count": 1, "subtotal": "30.00", "savings": "0.00"}


@pytest.mark.parametrize("quantity", [2.7, True, "1.5"])
def test_fractional_quantities_rejected(user, make_product, quantity):
    p = make_product(stock=10)
    with pytest.raises(BadRequest):
        cart_service.add_item(user.id, p.id, quantity)
    assert cart_service.get_items(user.id) == []


def test_whole_float_quantity_accepted(user, make_product):
    p = make_product(stock=10)
    assert cart_service.add_item(user.id, p.id, 2.0).quantity == 2
