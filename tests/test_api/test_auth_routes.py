from __future__ import annotations

import pytest


def _register(client, email="shopper@example.com", password="password123", **extra):
    return client.post("/api/auth/register", json={"email": email, "password": password, **extra})


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_register_returns_token_and_user(client):
    response = _register(client, name="Shopper")
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "shopper@example.com"
    assert body["user"]["name"] == "Shopper"
    assert body["user"]["plan"] == "free"


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"email": "a@example.com"}, "Email and password are required"),
        ({"email": "a@example.com", "password": "short"}, "Password must be at least 8 characters"),
        ({"email": "not-an-email", "password": "password123"}, "Invalid email format"),
    ],
)
def test_register_validation(client, payload, message):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == message


def test_register_duplicate_is_conflict(client):
    _register(client)
    response = _register(client, email="SHOPPER@example.com")
    assert response.status_code == 409
    assert response.json() == {"error": "User already exists"}


def test_login_reports_free_plan_without_stripe(client):
    _register(client)
    response = client.post("/api/auth/login", json={"email": "shopper@example.com", "password": "password123"})
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["subscription"] == "free"
    assert user["usage"] == {}


def test_login_rejects_bad_password(client):
    _register(client)
    response = client.post("/api/auth/login", json={"email": "shopper@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_verify_token(client):
    token = _register(client).json()["token"]
    response = client.get("/api/auth/verify", headers=_auth(token))
    assert response.status_code == 200
    assert response.json()["valid"] is True

    assert client.get("/api/auth/verify").json() == {"error": "No token provided"}
    assert client.get("/api/auth/verify", headers=_auth("garbage")).json() == {"error": "Invalid token"}


def test_credits_and_deduction(client):
    token = _register(client).json()["token"]

    credits = client.get("/api/auth/credits", headers=_auth(token)).json()
    assert credits["credits"]["descriptions"] == 3
    assert credits["usage"] == {}

    deducted = client.post("/api/auth/credits/deduct", json={"type": "descriptions", "amount": 2}, headers=_auth(token))
    assert deducted.json() == {"success": True, "remaining": 1}

    refused = client.post("/api/auth/credits/deduct", json={"type": "descriptions", "amount": 2}, headers=_auth(token))
    assert refused.status_code == 402
    assert refused.json() == {"error": "Insufficient credits", "remaining": 1}

    invalid = client.post("/api/auth/credits/deduct", json={"type": "tokens"}, headers=_auth(token))
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "Invalid credit type"


def test_logout_ends_session(client):
    token = _register(client).json()["token"]
    assert client.post("/api/auth/logout", headers=_auth(token)).json() == {"success": True}

    response = client.get("/api/auth/credits", headers=_auth(token))
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid session"}


def test_login_falls_back_to_free_when_subscription_has_no_items(client, env, monkeypatch):
    import stripe

    env(STRIPE_SECRET_KEY="sk_test_123")
    _register(client)
    monkeypatch.setattr(stripe.Customer, "list", lambda **params: {"data": [{"id": "cus_1"}]})
    monkeypatch.setattr(stripe.Subscription, "list", lambda **params: {"data": [{"id": "sub_1", "items": None}]})
    response = client.post("/api/auth/login", json={"email": "shopper@example.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["user"]["subscription"] == "free"


def test_login_survives_stripe_outage(client, env, monkeypatch):
    import stripe

    env(STRIPE_SECRET_KEY="sk_test_123")
    _register(client)

    def unreachable(**params):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.Customer, "list", unreachable)
    response = client.post("/api/auth/login", json={"email": "shopper@example.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["user"]["subscription"] == "free"


def test_verify_rejects_token_without_expiry(client):
    import jwt

    from app.core.security import ALGORITHM, get_settings

    token = jwt.encode({"userId": "u1"}, get_settings().jwt_secret.get_secret_value(), algorithm=ALGORITHM)
    response = client.get("/api/auth/verify", headers=_auth(token))
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}
