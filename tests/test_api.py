"""Tests for the HTTP surface: status codes, bodies and sanitization."""

import pytest
from fastapi.testclient import TestClient

from otp_auth.main import app
from otp_auth.services.auth import AuthService

from tests.fakes import FailingNotifier, wrong_code

EMAIL = "a@x.com"


@pytest.fixture
def client(service):
    # no lifespan: the test service replaces the SQL/SMTP wiring
    app.state.auth_service = service
    yield TestClient(app)
    app.state.auth_service = None


def _login(client, notifier, email: str = EMAIL):
    client.post("/signup", json={"email": email})
    resp = client.post("/login", json={"email": email, "otp": notifier.last_code()})
    assert resp.status_code == 200
    return resp.json()


# ---------------------------------------------------------------------------
# 1. POST /signup
# ---------------------------------------------------------------------------

class TestSignup:
    def test_new_user_created(self, client, notifier):
        resp = client.post("/signup", json={"email": EMAIL})
        assert resp.status_code == 201
        assert resp.json() == {"message": "User signed up successfully"}
        assert notifier.last_code() not in resp.text

    def test_existing_user_gets_login_code(self, client, notifier):
        client.post("/signup", json={"email": EMAIL})
        resp = client.post("/signup", json={"email": EMAIL})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Login OTP sent"}
        assert notifier.last_code() not in resp.text

    @pytest.mark.parametrize("body", [{}, {"email": "no-at-sign"}, {"email": "@x.com"}])
    def test_invalid_email_rejected(self, client, body):
        assert client.post("/signup", json=body).status_code == 422

    def test_delivery_failure_is_opaque_500(self, store, issuer, otp_engine):
        app.state.auth_service = AuthService(
            store=store, notifier=FailingNotifier(), issuer=issuer, otp=otp_engine
        )
        try:
            resp = TestClient(app).post("/signup", json={"email": EMAIL})
        finally:
            app.state.auth_service = None
        assert resp.status_code == 500
        assert resp.json()["error"] == "DELIVERY_FAILED"
        assert "smtp.example.com" not in resp.text

    def test_throttled_resend(self, store, notifier, issuer, otp_engine):
        app.state.auth_service = AuthService(
            store=store, notifier=notifier, issuer=issuer, otp=otp_engine, resend_cooldown_seconds=60
        )
        try:
            client = TestClient(app)
            client.post("/signup", json={"email": EMAIL})
            resp = client.post("/signup", json={"email": EMAIL})
        finally:
            app.state.auth_service = None
        assert resp.status_code == 429
        assert resp.json()["error"] == "THROTTLED"
        assert int(resp.headers["retry-after"]) > 0


# ---------------------------------------------------------------------------
# 2. POST /login
# ---------------------------------------------------------------------------

class TestLogin:
    def test_scenario(self, client, notifier):
        client.post("/signup", json={"email": EMAIL})
        code = notifier.last_code()

        resp = client.post("/login", json={"email": EMAIL, "otp": wrong_code(code)})
        assert resp.status_code == 401
        assert resp.json()["error"] == "INVALID_CODE"

        resp = client.post("/login", json={"email": EMAIL, "otp": code})
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Login successful"
        assert body["token"]
        assert body["user"]["email"] == EMAIL
        assert body["user"]["role"] == "standard"
        assert "otp_hash" not in body["user"]

        resp = client.post("/login", json={"email": EMAIL, "otp": code})
        assert resp.status_code == 401
        assert resp.json()["error"] == "ALREADY_USED"

    def test_numeric_otp_accepted(self, client, notifier):
        client.post("/signup", json={"email": EMAIL})
        resp = client.post("/login", json={"email": EMAIL, "otp": int(notifier.last_code())})
        assert resp.status_code == 200

    def test_unknown_user_404(self, client):
        resp = client.post("/login", json={"email": "nobody@x.com", "otp": "123456"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "NOT_FOUND", "message": "User not found"}

    def test_missing_otp_422(self, client):
        assert client.post("/login", json={"email": EMAIL}).status_code == 422


# ---------------------------------------------------------------------------
# 3. GET /me
# ---------------------------------------------------------------------------

class TestMe:
    def test_raw_token(self, client, notifier):
        login = _login(client, notifier)
        resp = client.get("/me", headers={"Authorization": login["token"]})
        assert resp.status_code == 200
        assert resp.json()["user"] == login["user"]

    def test_bearer_token(self, client, notifier):
        login = _login(client, notifier)
        resp = client.get("/me", headers={"Authorization": f"Bearer {login['token']}"})
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == login["user"]["id"]

    def test_missing_header_401(self, client):
        resp = client.get("/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHENTICATED"

    def test_garbage_token_401(self, client):
        resp = client.get("/me", headers={"Authorization": "garbage"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "TOKEN_MALFORMED"

    def test_deleted_user_404(self, client, store, notifier):
        login = _login(client, notifier)
        store.rows.clear()
        resp = client.get("/me", headers={"Authorization": login["token"]})
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 4. Sanitization ahead of handlers
# ---------------------------------------------------------------------------

class TestSanitization:
    def test_markup_in_body_is_neutralized_before_storage(self, client, store):
        resp = client.post("/signup", json={"email": "<b>x</b>@x.com"})
        assert resp.status_code == 201
        stored = next(iter(store.rows.values()))
        assert stored["email"] == "&lt;b&gt;x&lt;/b&gt;@x.com"

    def test_deep_body_rejected(self, client):
        body = {"email": EMAIL}
        for _ in range(40):
            body = {"wrap": body}
        resp = client.post("/signup", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "PAYLOAD_TOO_DEEP"

    def test_body_beyond_decoder_limit_rejected(self, client):
        raw = "[" * 100_000 + "]" * 100_000
        resp = client.post("/signup", content=raw, headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "PAYLOAD_TOO_DEEP"

    def test_quotes_survive_round_trip(self, client, notifier):
        login = _login(client, notifier, email="o'neil@x.com")
        assert login["user"]["email"] == "o'neil@x.com"
        assert login["user"]["display_name"] == "o'neil"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
