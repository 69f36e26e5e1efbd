from datetime import timedelta

import pytest

from lostfound import create_app
from lostfound.modules.public import routes as public_routes
from lostfound.modules.users import activity
from lostfound.timeutil import utcnow


def test_register_then_login_without_second_factor(client):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": " New.Student@Chitkara.edu.in ", "fullName": "New Student", "password": "s3cret-pass"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["email"] == "new.student@chitkara.edu.in"
    assert body["token"]

    login = client.post("/api/v1/auth/login", json={"email": "new.student@chitkara.edu.in", "password": "s3cret-pass"})
    assert login.status_code == 200
    assert login.get_json()["id"] == body["id"]
    assert "otpRequired" not in login.get_json()


def test_register_rejects_duplicate_email(client, make_user):
    user = make_user()
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": user.email, "fullName": "Copy", "password": "password123"},
    )
    assert resp.status_code == 409


def test_login_with_wrong_password(client, make_user):
    user = make_user()
    resp = client.post("/api/v1/auth/login", json={"email": user.email, "password": "nope"})
    assert resp.status_code == 401


def test_invalid_bearer_token_is_anonymous(client):
    resp = client.get("/api/v1/users/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_x_user_id_header_never_authenticates(app, client, make_user):
    user = make_user()
    headers = {"X-User-Id": str(user.id)}
    assert client.get("/api/v1/users/me", headers=headers).status_code == 401

    app.config["DEBUG"] = True
    assert client.get("/api/v1/users/me", headers=headers).status_code == 401


def test_default_config_is_development_without_header_auth(monkeypatch):
    monkeypatch.delenv("FLASK_ENV", raising=False)
    app = create_app()
    assert app.config["DEBUG"] is True
    resp = app.test_client().get("/api/v1/users/me", headers={"X-User-Id": "1"})
    assert resp.status_code == 401


def test_profile_update_and_activity_feed(client, auth, make_user):
    user = make_user()
    resp = client.patch(
        "/api/v1/users/me",
        json={"fullName": "Renamed", "phone": "555-0199", "twoFactorEnabled": True},
        headers=auth(user),
    )
    assert resp.status_code == 200
    me = resp.get_json()["user"]
    assert me["fullName"] == "Renamed"
    assert me["twoFactorEnabled"] is True

    feed = client.get("/api/v1/users/me/activities", headers=auth(user)).get_json()["activities"]
    assert [a["type"] for a in feed] == ["two_factor_enabled"]


def test_reporting_an_item_is_recorded_as_activity(client, auth, make_user, create_item):
    user = make_user()
    item = create_item(user)
    feed = client.get("/api/v1/users/me/activities", headers=auth(user)).get_json()["activities"]
    assert feed[0]["type"] == "item_reported"
    assert feed[0]["metadata"]["itemId"] == item["id"]


def test_old_activities_are_purged(make_user, create_item):
    user = make_user()
    create_item(user)
    assert activity.purge_old_activities(30) == 0
    assert activity.purge_old_activities(30, now=utcnow() + timedelta(days=31)) == 1


@pytest.fixture
def mailbox(monkeypatch):
    sent = []

    def fake_send(to_address, subject, body_html, **kwargs):
        sent.append(to_address)
        return True

    monkeypatch.setattr(public_routes, "send_email", fake_send)
    return sent


def test_contact_form_forwards_to_support_and_confirms(client, mailbox):
    resp = client.post(
        "/api/v1/public/contact",
        json={"name": "Visitor", "email": "visitor@example.com", "message": "Where is the lost & found desk?"},
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "confirmationSent": True}
    assert mailbox == ["support@example.edu", "visitor@example.com"]


def test_contact_form_fails_when_support_email_fails(client, monkeypatch):
    monkeypatch.setattr(public_routes, "send_email", lambda *a, **kw: False)
    resp = client.post(
        "/api/v1/public/contact",
        json={"name": "Visitor", "email": "visitor@example.com", "message": "Hello"},
    )
    assert resp.status_code == 502


def test_contact_form_validates_input(client, mailbox):
    resp = client.post("/api/v1/public/contact", json={"name": "", "email": "not-an-email", "message": "x"})
    assert resp.status_code == 400
    assert mailbox == []


def test_two_factor_needs_institutional_email(client, auth, make_user):
    user = make_user(email="bob@gmail.com")
    resp = client.patch("/api/v1/users/me", json={"twoFactorEnabled": True, "fullName": "Bob"}, headers=auth(user))
    assert resp.status_code == 403

    me = client.get("/api/v1/users/me", headers=auth(user)).get_json()["user"]
    assert me["twoFactorEnabled"] is False
    assert me["fullName"] == "Test User"

    login = client.post("/api/v1/auth/login", json={"email": "bob@gmail.com", "password": "password123"})
    assert login.status_code == 200
    assert login.get_json()["token"]


def test_two_factor_can_always_be_disabled(client, auth, make_user):
    user = make_user(email="legacy@gmail.com", two_factor=True)
    resp = client.patch("/api/v1/users/me", json={"twoFactorEnabled": False}, headers=auth(user))
    assert resp.status_code == 200
    assert resp.get_json()["user"]["twoFactorEnabled"] is False
