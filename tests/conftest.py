# tests/conftest.py
import httpx
import pytest
from fastapi.testclient import TestClient

from bookmarket import crud
from bookmarket.config import Settings
from bookmarket.images import ImgurClient
from bookmarket.main import create_app

PASSWORD = "password123"


class FakeImgur:
    """Stands in for the Imgur API behind an httpx.MockTransport."""

    def __init__(self):
        self.calls = 0
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        assert request.headers["Authorization"] == "Client-ID test-client"
        if self.fail:
            return httpx.Response(503, json={"success": False})
        n = self.calls
        return httpx.Response(200, json={
            "success": True,
            "data": {"link": f"https://i.imgur.com/img{n}.png", "deletehash": f"del{n}"},
        })


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        session_secret="test-secret",
        imgur_client_id="test-client",
        bcrypt_rounds=4,
        login_failure_delay=0,
    )


@pytest.fixture
def imgur():
    return FakeImgur()


@pytest.fixture
def app(settings, imgur):
    host = ImgurClient(settings.imgur_client_id, transport=httpx.MockTransport(imgur.handler))
    return create_app(settings, image_host=host)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_client(app, client):
    """Extra clients with their own cookie jars, sharing the app's database."""
    def _make():
        return TestClient(app)
    return _make


@pytest.fixture
def db(app, client):
    session = app.state.db.session()
    yield session
    session.close()


def register(c, email, name="Reader", password=PASSWORD):
    res = c.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert res.status_code == 201, res.text
    return c.get("/api/auth/me").json()


def login(c, email, password=PASSWORD):
    res = c.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res


def book_payload(**overrides):
    payload = {
        "title": "Calculus: Early Transcendentals",
        "condition": "Good",
        "price": 45.5,
        "description": "8th edition, some highlighting in chapter 3.",
        "sellerProfile": "https://instagram.com/ann.books",
        "images": ["https://i.imgur.com/a.png", "https://i.imgur.com/b.png"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def seller(make_client):
    c = make_client()
    me = register(c, "seller@x.com", name="Sam")
    return c, me


@pytest.fixture
def buyer(make_client):
    c = make_client()
    me = register(c, "buyer@x.com", name="Bea")
    return c, me


@pytest.fixture
def admin(make_client, db):
    c = make_client()
    register(c, "admin@x.com", name="Ada")
    assert crud.set_admin(db, "admin@x.com")
    # the admin flag is read into the token at login
    login(c, "admin@x.com")
    return c, c.get("/api/auth/me").json()


@pytest.fixture
def anonymous(make_client):
    return make_client()
