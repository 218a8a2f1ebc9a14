# tests/test_auth.py
import time

import pytest
from itsdangerous import TimestampSigner

from bookmarket import crud
from bookmarket.auth import SESSION_COOKIE_NAME, SessionManager, hash_password, verify_password
from bookmarket.exceptions import ConfigurationError
from bookmarket.schemas import SessionData

from conftest import PASSWORD, login, register


def test_register_login_and_me(client):
    res = client.post("/api/auth/register", json={"email": "a@x.com", "password": "password123", "name": "Ann"})
    assert res.status_code == 201, res.text
    assert SESSION_COOKIE_NAME in res.cookies

    client.cookies.clear()
    res = client.post("/api/auth/login", json={"email": "a@x.com", "password": "password123"})
    assert res.status_code == 200
    cookie = res.headers["set-cookie"].lower()
    assert "httponly" in cookie
    assert "samesite=strict" in cookie
    assert "max-age=86400" in cookie
    assert "path=/" in cookie

    me = client.get("/api/auth/me").json()
    assert me["email"] == "a@x.com"
    assert me["name"] == "Ann"
    assert me["admin"] is False
    assert me["userId"]
    assert me["lastUsedSellerProfile"] == ""


def test_register_rejects_duplicate_email(client):
    register(client, "dup@x.com")
    res = client.post("/api/auth/register", json={"email": "dup@x.com", "password": PASSWORD, "name": "Other"})
    assert res.status_code == 400
    assert res.json()["message"] == "User already exists"


@pytest.mark.parametrize("body,message", [
    ({"email": "no-at-sign", "password": PASSWORD, "name": "Ann"}, "Invalid email format"),
    ({"email": "a@x.com", "password": "short", "name": "Ann"}, "Password must be between 8-100 characters"),
    ({"email": "a@x.com", "password": PASSWORD, "name": "A"}, "Name must be between 2-50 characters"),
])
def test_register_validation(client, body, message):
    res = client.post("/api/auth/register", json=body)
    assert res.status_code == 400
    assert res.json()["message"] == message


def test_register_rejects_unknown_fields(client):
    res = client.post("/api/auth/register", json={
        "email": "a@x.com", "password": PASSWORD, "name": "Ann", "admin": True,
    })
    assert res.status_code == 400
    assert "admin" in res.json()["message"]


def test_register_strips_angle_brackets_from_name(client):
    me = register(client, "b@x.com", name="<b>Bob</b>")
    assert me["name"] == "bBob/b"


def test_login_failures_are_indistinguishable(client):
    register(client, "c@x.com")
    client.cookies.clear()
    wrong_password = client.post("/api/auth/login", json={"email": "c@x.com", "password": "not-the-one"})
    unknown_email = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": PASSWORD})
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"message": "Invalid credentials"}
    assert SESSION_COOKIE_NAME not in wrong_password.cookies


def test_login_failure_waits(client, app):
    app.state.settings.login_failure_delay = 0.2
    started = time.monotonic()
    res = client.post("/api/auth/login", json={"email": "ghost@x.com", "password": PASSWORD})
    assert res.status_code == 401
    assert time.monotonic() - started >= 0.2


def test_login_stamps_last_login(client, db):
    register(client, "d@x.com")
    login(client, "d@x.com")
    db.expire_all()
    assert crud.get_user_by_email(db, "d@x.com").last_login_at is not None


def test_me_without_session(anonymous):
    res = anonymous.get("/api/auth/me")
    assert res.status_code == 401


def test_me_with_tampered_cookie(client):
    register(client, "e@x.com")
    token = client.cookies.get(SESSION_COOKIE_NAME)
    client.cookies.clear()
    client.cookies.set(SESSION_COOKIE_NAME, token[:-2] + "xx")
    assert client.get("/api/auth/me").status_code == 401


def test_logout_clears_cookie_but_token_stays_valid(client):
    register(client, "f@x.com")
    token = client.cookies.get(SESSION_COOKIE_NAME)
    res = client.post("/api/auth/logout")
    assert res.status_code == 200
    assert client.get("/api/auth/me").status_code == 401

    # no server-side revocation
    client.cookies.clear()
    client.cookies.set(SESSION_COOKIE_NAME, token)
    assert client.get("/api/auth/me").status_code == 200


def test_update_profile(client):
    register(client, "g@x.com")
    res = client.post("/api/auth/update-profile", json={"lastUsedSellerProfile": "https://fb.com/g"})
    assert res.status_code == 200
    assert client.get("/api/auth/me").json()["lastUsedSellerProfile"] == "https://fb.com/g"


def test_update_profile_requires_session_and_value(client, anonymous):
    assert anonymous.post("/api/auth/update-profile", json={"lastUsedSellerProfile": "x"}).status_code == 401
    register(client, "h@x.com")
    res = client.post("/api/auth/update-profile", json={"lastUsedSellerProfile": "  "})
    assert res.status_code == 400
    assert res.json()["message"] == "Missing seller profile"


# ---- session tokens ----

IDENTITY = SessionData(user_id="u1", email="a@x.com", name="Ann", admin=False)


def test_session_roundtrip():
    sessions = SessionManager("secret")
    assert sessions.verify(sessions.issue(IDENTITY)) == IDENTITY


def test_session_rejects_other_key():
    token = SessionManager("secret").issue(IDENTITY)
    assert SessionManager("other-secret").verify(token) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_session_rejects_malformed(token):
    assert SessionManager("secret").verify(token) is None


def test_session_expires_after_24_hours(monkeypatch):
    sessions = SessionManager("secret")
    issued_at = int(time.time()) - 24 * 60 * 60 - 5
    monkeypatch.setattr(TimestampSigner, "get_timestamp", lambda self: issued_at)
    token = sessions.issue(IDENTITY)
    monkeypatch.undo()
    assert sessions.verify(token) is None


def test_session_valid_just_before_expiry(monkeypatch):
    sessions = SessionManager("secret")
    issued_at = int(time.time()) - 23 * 60 * 60
    monkeypatch.setattr(TimestampSigner, "get_timestamp", lambda self: issued_at)
    token = sessions.issue(IDENTITY)
    monkeypatch.undo()
    assert sessions.verify(token) == IDENTITY


def test_session_requires_secret():
    with pytest.raises(ConfigurationError):
        SessionManager("")


def test_password_hashing():
    hashed = hash_password("password123", rounds=4)
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)
    assert not verify_password("password123", "not-a-bcrypt-hash")


def test_login_costs_the_same_for_unknown_email(client, app):
    app.state.settings.bcrypt_rounds = 10
    register(client, "known@x.com")
    client.cookies.clear()
    # first failure builds the stand-in hash for these rounds
    client.post("/api/auth/login", json={"email": "warmup@x.com", "password": PASSWORD})

    def timed(email, password):
        started = time.monotonic()
        res = client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 401
        return time.monotonic() - started

    wrong = min(timed("known@x.com", "not-the-one") for _ in range(3))
    unknown = min(timed("unknown@x.com", PASSWORD) for _ in range(3))
    assert unknown >= wrong * 0.5


def test_login_strips_email_like_register(client):
    register(client, " spaced@x.com ")
    client.cookies.clear()
    res = client.post("/api/auth/login", json={"email": " spaced@x.com ", "password": PASSWORD})
    assert res.status_code == 200
    assert client.get("/api/auth/me").json()["email"] == "spaced@x.com"
