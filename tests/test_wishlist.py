import pytest

from storefront.errors import Conflict, NotFound
from storefront.services import wishlist_service


def test_add_and_duplicate(user, make_product):
    p = make_product()
    wishlist_service.add_item(user.id, p.id)

    with pytest.raises(Conflict):
        wishlist_service.add_item(user.id, str(p.id))

    assert wishlist_service.count(user.id) == 1
    assert wishlist_service.contains(user.id, p.id) is True


def test_add_inactive_product(user, make_product):
    with pytest.raises(NotFound):
        wishlist_service.add_item(user.id, make_product(active=False).id)


def test_remove_paths(user, make_product):
    a, b = make_product(), make_product()
    item = wishlist_service.add_item(user.id, a.id)
    wishlist_service.add_item(user.id, b.id)

    wishlist_service.remove_item(user.id, item.id)
    wishlist_service.remove_by_product(user.id, b.id)

    assert wishlist_service.get_items(user.id) == []
    with pytest.raises(NotFound):
        wishlist_service.remove_by_product(user.id, b.id)


def test_clear_is_idempotent(user, make_product):
    wishlist_service.add_item(user.id, make_product().id)
    wishlist_service.clear(user.id)
    wishlist_service.clear(user.id)
    assert wishlist_service.count(user.id) == 0


def test_wishlist_http(client, user, make_product, auth_headers):
    p = make_product()
    h = auth_headers(user)

    assert client.post("/api/wishlist", json={"product_id": str(p.id)}, headers=h).status_code == 201
    r = client.post("/api/wishlist", json={"product_id": str(p.id)}, headers=h)
    assert r.status_code == 409
    assert r.get_json()["data"]["code"] == "CONFLICT"

    assert client.get(f"/api/wishlist/contains/{p.id}", headers=h).get_json()["data"]["in_wishlist"] is True
    assert len(client.get("/api/wishlist", headers=h).get_json()["data"]["items"]) == 1
