import pytest

from storefront.errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from storefront.model import Address
from storefront.services import user_service

ADDRESS = {
    "first_name": "Asha", "last_name": "Rao", "address_line1": "12 MG Road",
    "city": "Bengaluru", "state": "KA", "postal_code": "560001", "country": "India",
}


def test_signup_and_login():
    u = user_service.signup("Asha", "Asha@Example.com", "secret123")

    assert u.email == "asha@example.com"
    assert u.role == "user"
    assert user_service.authenticate("asha@example.com", "secret123").id == u.id
    with pytest.raises(Conflict):
        user_service.signup("Other", "asha@example.com", "secret123")
    with pytest.raises(Unauthorized):
        user_service.authenticate("asha@example.com", "wrong-pass")


def test_signup_validation():
    with pytest.raises(BadRequest):
        user_service.signup("A", "a@example.com", "123")
    with pytest.raises(BadRequest):
        user_service.signup("A", "not-an-email", "secret123")


def test_blocked_user_cannot_login(make_user):
    make_user(email="b@example.com", blocked=True)
    with pytest.raises(Forbidden):
        user_service.authenticate("b@example.com", "secret123")


def test_default_address_is_unique_per_type(user):
    first = user_service.create_address(user.id, {**ADDRESS, "is_default": True})
    second = user_service.create_address(user.id, {**ADDRESS, "city": "Mysuru"})
    billing = user_service.create_address(user.id, {**ADDRESS, "type": "billing", "is_default": True})

    user_service.set_default_address(user.id, second.id)

    defaults = Address.query.filter_by(user_id=user.id, is_default=True).all()
    assert {a.id for a in defaults} == {second.id, billing.id}
    assert user_service.list_addresses(user.id, "shipping")[0].id == second.id
    assert first.country == "India"


def test_address_validation_and_ownership(make_user):
    owner, other = make_user(), make_user()
    with pytest.raises(BadRequest):
        user_service.create_address(owner.id, {"first_name": "A"})

    a = user_service.create_address(owner.id, ADDRESS)
    with pytest.raises(NotFound):
        user_service.get_address(other.id, a.id)
    with pytest.raises(BadRequest):
        user_service.update_address(owner.id, a.id, {"city": ""})

    user_service.delete_address(owner.id, a.id)
    assert user_service.list_addresses(owner.id) == []


def test_admin_cannot_block_or_demote_self(admin, user):
    with pytest.raises(BadRequest):
        user_service.set_blocked(admin, admin.id, True)
    with pytest.raises(BadRequest):
        user_service.set_role(admin, admin.id, "user")

    assert user_service.set_blocked(admin, user.id, True).blocked is True
    assert user_service.set_role(admin, user.id, "admin").role == "admin"


def test_list_users_filters(admin, make_user):
    make_user(name="Blocked One", blocked=True)
    make_user(name="Regular")

    assert [u.name for u in user_service.list_users(blocked=True)] == ["Blocked One"]
    assert [u.role for u in user_service.list_users(role="admin")] == ["admin"]
    assert [u.name for u in user_service.list_users(search="regu")] == ["Regular"]


def test_auth_http_flow(client):
    r = client.post("/api/auth/register", json={"name": "Ravi", "email": "ravi@example.com", "password": "secret123"})
    assert r.status_code == 201

    r = client.post("/api/auth/register", json={"name": "Ravi", "email": "ravi@example.com", "password": "secret123"})
    assert r.status_code == 409

    r = client.post("/api/auth/login", json={"email": "ravi@example.com", "password": "secret123"})
    data = r.get_json()["data"]
    headers = {"Authorization": f"Bearer {data['token']}"}
    assert client.get("/api/users/me", headers=headers).get_json()["data"]["user"]["email"] == "ravi@example.com"

    r = client.post("/api/auth/refresh", json={"refresh_token": data["refresh_token"]})
    assert r.status_code == 200
    assert r.get_json()["data"]["refresh_token"] != data["refresh_token"]

    # rotated: the old token is single-use
    assert client.post("/api/auth/refresh", json={"refresh_token": data["refresh_token"]}).status_code == 401


def test_blocked_user_token_is_refused(client, make_user, auth_headers):
    u = make_user(blocked=True)
    r = client.get("/api/users/me", headers=auth_headers(u))
    assert r.status_code == 403


def test_admin_user_endpoints(client, admin, user, auth_headers):
    h = auth_headers(admin)

    assert client.get("/api/users", headers=auth_headers(user)).status_code == 403
    assert client.get(f"/api/users/{user.id}", headers=h).get_json()["data"]["user"]["id"] == str(user.id)

    r = client.patch(f"/api/users/{user.id}/block", headers=h, json={"blocked": True})
    assert r.get_json()["data"]["user"]["blocked"] is True

    r = client.patch(f"/api/users/{admin.id}/block", headers=h, json={"blocked": True})
    assert r.status_code == 400


def test_login_purges_expired_refresh_tokens(client, db, make_user):
    from datetime import timedelta

    from storefront.model import RefreshToken
    from storefront.model.types import utcnow

    u = make_user(email="old@example.com")
    db.session.add(RefreshToken(user_id=u.id, token="stale-token", expires_at=utcnow() - timedelta(days=1)))
    db.session.add(RefreshToken(user_id=u.id, token="live-token", expires_at=utcnow() + timedelta(days=1)))
    db.session.commit()

    r = client.post("/api/auth/login", json={"email": "old@example.com", "password": "secret123"})
    assert r.status_code == 200

    tokens = {t.token for t in RefreshToken.query.filter_by(user_id=u.id).all()}
    assert "stale-token" not in tokens
    assert "live-token" in tokens
    assert r.get_json()["data"]["refresh_token"] in tokens
