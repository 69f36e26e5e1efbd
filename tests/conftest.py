from datetime import date, timedelta

import pytest
from werkzeug.security import generate_password_hash

from lostfound import create_app
from lostfound.extensions import db as _db
from lostfound.models.user import User
from lostfound.modules.notifications import bus
from lostfound.security import issue_token


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture(autouse=True)
def clean_bus():
    yield
    bus._subs.clear()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(email=None, full_name="Test User", password="password123", two_factor=False, phone=None):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@chitkara.edu.in",
            full_name=full_name,
            phone=phone,
            password_hash=generate_password_hash(password),
            two_factor_enabled=two_factor,
        )
        _db.session.add(user)
        _db.session.commit()
        return user

    return _make


@pytest.fixture
def auth(app):
    def _headers(user):
        return {"Authorization": f"Bearer {issue_token(int(user.id))}"}

    return _headers


@pytest.fixture
def item_payload():
    def _payload(**overrides):
        data = {
            "kind": "found",
            "category": "bags",
            "title": "Blue Backpack",
            "description": "Navy blue backpack with a laptop sleeve",
            "location": "Library, 2nd floor",
            "eventDate": (date.today() - timedelta(days=1)).isoformat(),
            "contactInfo": "Ask at the library desk",
        }
        data.update(overrides)
        return data

    return _payload


@pytest.fixture
def create_item(client, auth, item_payload):
    def _create(user, **overrides):
        resp = client.post("/api/v1/items", json=item_payload(**overrides), headers=auth(user))
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["item"]

    return _create


@pytest.fixture
def claim_setup(client, auth, make_user, create_item):
    """A found item owned by `owner` with a pending claim from `claimer`."""
    def _setup():
        owner = make_user(full_name="Finder", phone="555-0100")
        claimer = make_user(full_name="Loser")
        item = create_item(owner, title="Black Umbrella", category="accessories")
        resp = client.post(
            "/api/v1/claims",
            json={"itemId": item["id"], "message": "It has my initials on the handle"},
            headers=auth(claimer),
        )
        assert resp.status_code == 201, resp.get_json()
        return owner, claimer, item, resp.get_json()["claim"]

    return _setup
