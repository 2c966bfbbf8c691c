from models import AuditLog, User
from services.store import EntityStore

from conftest import PASSWORD


def _register(client, **overrides):
    body = {"email": "ada@example.com", "password": PASSWORD, "firstName": "Ada"}
    body.update(overrides)
    return client.post("/api/register", json=body)


def test_register_returns_user_without_hash(client):
    resp = _register(client, lastName="Obi", role="student")
    assert resp.status_code == 201

    payload = resp.get_json()
    assert payload["user"]["email"] == "ada@example.com"
    assert payload["user"]["role"] == "student"
    assert payload["token"]
    assert "passwordHash" not in payload["user"]
    assert "password_hash" not in payload["user"]
    assert PASSWORD not in resp.get_data(as_text=True)


def test_register_duplicate_email_conflicts(client):
    assert _register(client).status_code == 201
    resp = _register(client, email="  ADA@example.com ")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "User with this email already exists"


def test_register_rejects_bad_payloads(client):
    assert _register(client, email="not-an-email").status_code == 400
    assert _register(client, password="short").status_code == 400
    assert _register(client, firstName="").status_code == 400
    assert _register(client, role="superuser").status_code == 400
    # privileged fields are not accepted from the client
    assert _register(client, verifiedStatus=True).status_code == 400


def test_new_agent_starts_unverified(client):
    resp = _register(client, role="agent", businessRegNumber="RC-1234")
    assert resp.status_code == 201
    assert resp.get_json()["user"]["verifiedStatus"] is False
    assert resp.get_json()["user"]["businessRegNumber"] == "RC-1234"


def test_admin_self_signup_needs_code(app, client):
    assert _register(client, role="admin").status_code == 403

    app.config["ADMIN_SIGNUP_CODE"] = "let-me-in"
    assert _register(client, role="admin", adminCode="wrong").status_code == 403
    resp = _register(client, role="admin", adminCode="let-me-in")
    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "admin"


def test_register_password_is_bcrypt_hashed(app, client):
    _register(client)
    with app.app_context():
        user = User.query.filter_by(email="ada@example.com").one()
        assert user.password_hash.startswith("$2")
        assert user.password_hash != PASSWORD


def test_login_success_returns_identity(client, factory):
    factory.user("sam@example.com", role="agent")
    resp = client.post("/api/login", json={"email": "sam@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    user = resp.get_json()["user"]
    assert user["role"] == "agent"
    assert user["verifiedStatus"] is False
    assert "passwordHash" not in user


def test_login_email_is_case_insensitive(client, factory):
    factory.user("sam@example.com")
    resp = client.post("/api/login", json={"email": " Sam@Example.com", "password": PASSWORD})
    assert resp.status_code == 200


def test_unknown_email_and_wrong_password_look_the_same(client, factory):
    factory.user("sam@example.com")
    wrong_pw = client.post("/api/login", json={"email": "sam@example.com", "password": "nope-nope-nope"})
    unknown = client.post("/api/login", json={"email": "ghost@example.com", "password": PASSWORD})

    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.get_json() == unknown.get_json()


def test_login_with_missing_fields_is_invalid_credentials(client):
    resp = client.post("/api/login", json={"email": "", "password": ""})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid email or password"


def test_login_failures_are_audited(app, client, factory):
    factory.user("sam@example.com")
    client.post("/api/login", json={"email": "sam@example.com", "password": "bad-password"})
    with app.app_context():
        assert AuditLog.query.filter_by(action="LOGIN_FAIL").count() == 1


def test_current_user_requires_auth(client):
    resp = client.get("/api/user")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Authentication required"


def test_bearer_token_identifies_caller(client, factory, login):
    factory.user("sam@example.com", first_name="Sam")
    headers = login("sam@example.com")
    resp = client.get("/api/user", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["user"]["firstName"] == "Sam"


def test_logout_revokes_token(client, factory, login):
    factory.user("sam@example.com")
    headers = login("sam@example.com")
    assert client.post("/api/logout", headers=headers).status_code == 200
    assert client.get("/api/user", headers=headers).status_code == 401


def test_login_rotates_previous_sessions(client, factory, login):
    factory.user("sam@example.com")
    first = login("sam@example.com")
    second = login("sam@example.com")
    assert client.get("/api/user", headers=first).status_code == 401
    assert client.get("/api/user", headers=second).status_code == 200


def test_cookie_session_requires_csrf_on_mutations(client, factory):
    factory.user("sam@example.com")
    resp = client.post("/api/login", json={"email": "sam@example.com", "password": PASSWORD})
    assert resp.status_code == 200

    # cookie alone is enough to read
    assert client.get("/api/user").status_code == 200

    # but state-changing requests need the double-submit header
    resp = client.post("/api/logout")
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "CSRF validation failed"

    csrf = client.get_cookie("csrf_token").value
    assert client.post("/api/logout", headers={"X-CSRF-Token": csrf}).status_code == 200


def test_security_headers_present(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_register_rejects_passwords_longer_than_bcrypt_accepts(client):
    resp = _register(client, password="x" * 100)
    assert resp.status_code == 400
    assert resp.get_json()["details"] == ["Password must be at most 72 bytes"]

    # multi-byte characters count by their encoded size
    assert _register(client, password="é" * 37).status_code == 400
    assert _register(client, password="x" * 72).status_code == 201


def test_login_with_overlong_password_is_invalid_credentials(client, factory):
    factory.user("sam@example.com")
    resp = client.post("/api/login", json={"email": "sam@example.com", "password": "x" * 100})
    assert resp.status_code == 401


def test_register_race_on_email_is_a_conflict(client, monkeypatch):
    assert _register(client).status_code == 201

    # the lookup misses, as when two requests pass it at the same time
    monkeypatch.setattr(EntityStore, "get_user_by_email", lambda self, email: None)
    resp = _register(client)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "User with this email already exists"


def test_current_user_is_also_served_under_auth_prefix(client, factory, login):
    factory.user("sam@example.com", first_name="Sam")
    headers = login("sam@example.com")
    resp = client.get("/api/auth/user", headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()["user"]["firstName"] == "Sam"
    assert client.get("/api/auth/user").status_code == 401
