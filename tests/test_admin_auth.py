import re
from datetime import datetime, timedelta

from conftest import PASSWORD, login_as

from acrossmedia.models import Admin, AdminRole, AdminStatus

LOGIN_URL = "/api/auth/admin/login"
REGISTER_URL = "/api/auth/admin/register"


def _login(client, username, password=PASSWORD, ua="pytest", **extra):
    body = {"username": username, "password": password, **extra}
    return client.post(LOGIN_URL, json=body, headers={"User-Agent": ua})


def _solve(question: str) -> str:
    a, op, b = re.match(r"^(\d+) ([+*-]) (\d+) = \?$", question).groups()
    a, b = int(a), int(b)
    return str({"+": a + b, "-": a - b, "*": a * b}[op])


# ---------- Login ----------


def test_login_sets_http_only_cookie(client, admin_user):
    res = _login(client, "editor")
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Login successful as admin.", "role": "admin"}
    cookie = res.headers["set-cookie"]
    assert cookie.startswith("auth_token=")
    assert "HttpOnly" in cookie
    assert "samesite=strict" in cookie.lower()
    assert res.headers["RateLimit-Limit"] == "5"
    assert res.headers["RateLimit-Remaining"] == "4"

    status = client.get("/api/auth/admin/check-status")
    assert status.json() == {"isAuthenticated": True, "pendingApproval": False, "role": "admin"}


def test_failed_logins_carry_rate_limit_headers(client, admin_user):
    first = _login(client, "editor", "Wrong!Pass9")
    assert first.status_code == 401
    assert first.headers["RateLimit-Limit"] == "5"
    assert first.headers["RateLimit-Remaining"] == "4"
    assert first.headers["RateLimit-Reset"] == "900"

    malformed = _login(client, "a b", "weak")
    assert malformed.status_code == 400
    assert malformed.headers["RateLimit-Remaining"] == "3"


def test_wrong_password_and_unknown_user_look_the_same(client, admin_user):
    wrong = _login(client, "editor", "Wrong!Pass9", ua="a")
    unknown = _login(client, "nobody", PASSWORD, ua="b")
    for res in (wrong, unknown):
        assert res.status_code == 401
        assert res.json() == {
            "success": False,
            "message": "Invalid username or password.",
            "type": "INVALID_CREDENTIALS",
        }


def test_pending_account_cannot_log_in(client, make_admin):
    make_admin("newcomer", role=AdminRole.PENDING.value)
    res = _login(client, "newcomer")
    assert res.status_code == 403
    assert res.json()["type"] == "PENDING_APPROVAL"


def test_suspended_account_cannot_log_in(client, make_admin):
    make_admin("benched", status=AdminStatus.SUSPENDED.value)
    res = _login(client, "benched")
    assert res.status_code == 403
    assert res.json()["type"] == "ACCOUNT_DISABLED"


def test_malformed_login_is_validation_error(client):
    res = _login(client, "a b", "weak")
    assert res.status_code == 400
    body = res.json()
    assert body["type"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in body["details"]}
    assert {"username", "password"} <= fields


def test_rate_limit_then_captcha_then_429(client, admin_user):
    statuses = [_login(client, "editor", "Wrong!Pass9").status_code for _ in range(6)]
    # attempts 4 and 5 are rapid enough to need a CAPTCHA, the 6th is over the limit
    assert statuses == [401, 401, 401, 400, 400, 429]
    res = _login(client, "editor", "Wrong!Pass9")
    assert res.status_code == 429
    assert res.json()["type"] == "RATE_LIMIT_EXCEEDED"
    assert "Retry-After" in res.headers


def test_malformed_attempts_count_against_rate_limit(client):
    for _ in range(5):
        assert _login(client, "a b", "weak").status_code == 400
    assert _login(client, "a b", "weak").status_code == 429


def test_account_locks_after_five_failures(client, admin_user):
    for i in range(5):
        assert _login(client, "editor", "Wrong!Pass9", ua=f"browser-{i}").status_code == 401
    res = _login(client, "Editor", ua="browser-fresh")
    assert res.status_code == 423
    assert res.json()["type"] == "ACCOUNT_LOCKED"
    assert "30 minutes" in res.json()["message"]


def test_lockout_expires(client, admin_user, clock):
    for i in range(5):
        _login(client, "editor", "Wrong!Pass9", ua=f"browser-{i}")
    clock.advance(30 * 60)
    assert _login(client, "editor", ua="browser-later").status_code == 200


def test_suspicious_login_needs_captcha(client, admin_user):
    for _ in range(3):
        _login(client, "editor", "Wrong!Pass9")

    res = _login(client, "editor")
    assert res.status_code == 400
    assert res.json()["type"] == "CAPTCHA_REQUIRED"

    challenge = client.get("/api/auth/admin/captcha").json()
    assert set(challenge) == {"id", "question", "expiresAt"}
    res = _login(client, "editor", captchaId=challenge["id"], captchaAnswer=_solve(challenge["question"]))
    assert res.status_code == 200


def test_wrong_captcha_answer_is_rejected(client, admin_user):
    for _ in range(3):
        _login(client, "editor", "Wrong!Pass9")
    challenge = client.get("/api/auth/admin/captcha").json()
    wrong = str(int(_solve(challenge["question"])) + 1)
    res = _login(client, "editor", captchaId=challenge["id"], captchaAnswer=wrong)
    assert res.status_code == 400
    assert res.json()["type"] == "CAPTCHA_INVALID"


def test_logout_expires_cookie(client, admin_user):
    login_as(client, admin_user)
    res = client.post("/api/auth/admin/logout")
    assert res.status_code == 200
    assert res.json()["success"] is True
    assert 'auth_token=""' in res.headers["set-cookie"] or "auth_token=;" in res.headers["set-cookie"]


# ---------- Session ----------


def test_check_status_without_cookie(client):
    assert client.get("/api/auth/admin/check-status").json() == {"isAuthenticated": False}


def test_check_status_with_garbage_cookie_clears_it(client):
    client.cookies.set("auth_token", "not-a-jwt")
    res = client.get("/api/auth/admin/check-status")
    assert res.json() == {"isAuthenticated": False}
    assert "auth_token=" in res.headers["set-cookie"]


def test_check_status_reports_pending(client, make_admin):
    login_as(client, make_admin("waiting", role=AdminRole.PENDING.value))
    res = client.get("/api/auth/admin/check-status")
    assert res.json() == {"isAuthenticated": True, "pendingApproval": True, "role": "pending"}


def test_me_requires_cookie(client):
    res = client.get("/api/auth/admin/me")
    assert res.status_code == 401
    assert res.json()["message"] == "Authentication token missing"


def test_me_returns_profile_without_secrets(admin_client):
    body = admin_client.get("/api/auth/admin/me").json()
    assert body["username"] == "editor"
    assert "password" not in body
    assert "approvalToken" not in body


# ---------- Registration ----------


def _register(client, username="newbie", email="newbie@acrossmedia.test", password=PASSWORD):
    return client.post(REGISTER_URL, json={"username": username, "email": email, "password": password})


def test_register_creates_pending_account(client, db_session, superadmin):
    res = _register(client, email="NewBie@AcrossMedia.test")
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["user"]["role"] == "pending"
    assert body["user"]["email"] == "newbie@acrossmedia.test"
    assert re.fullmatch(r"[0-9a-f]{32}", body["pendingSessionToken"])

    admin = db_session.query(Admin).filter(Admin.username == "newbie").one()
    assert re.fullmatch(r"[0-9a-f]{64}", admin.approval_token)
    assert admin.approval_token_expires - admin.created_at == timedelta(hours=1)
    assert admin.password != PASSWORD


def test_register_rejects_weak_password(client):
    res = _register(client, password="abc123")
    assert res.status_code == 400
    assert res.json()["type"] == "VALIDATION_ERROR"


def test_register_duplicate_of_approved_account(client, admin_user):
    res = _register(client, username="editor", email="other@acrossmedia.test")
    assert res.status_code == 400
    assert res.json()["message"] == "Username is already taken."
    res = _register(client, username="someone", email="editor@acrossmedia.test")
    assert res.status_code == 400
    assert res.json()["message"] == "Email is already registered."


def test_repeated_registration_of_pending_account_is_throttled(client, db_session):
    assert _register(client).status_code == 201
    assert _register(client).status_code == 409
    assert _register(client).status_code == 409
    res = _register(client)
    assert res.status_code == 429
    assert "10 minute" in res.json()["message"]
    assert _register(client).status_code == 429

    admin = db_session.query(Admin).filter(Admin.username == "newbie").one()
    admin.block_until = datetime.utcnow() - timedelta(seconds=1)
    db_session.commit()
    assert _register(client).status_code == 409
    db_session.refresh(admin)
    assert admin.registration_attempts == 0
    assert admin.block_until is None


# ---------- Approval ----------


def test_superadmin_approves_pending_account(superadmin_client, make_admin, db_session):
    pending = make_admin("waiting", role=AdminRole.PENDING.value, approval_token="t" * 64)
    res = superadmin_client.post(f"/api/auth/admin/approve/{pending.id}")
    assert res.status_code == 200
    db_session.refresh(pending)
    assert pending.role == "admin"
    assert pending.approval_token is None
    assert pending.approved_at is not None

    again = superadmin_client.post(f"/api/auth/admin/approve/{pending.id}")
    assert again.status_code == 400


def test_approve_requires_superadmin(admin_client, make_admin):
    pending = make_admin("waiting", role=AdminRole.PENDING.value)
    assert admin_client.post(f"/api/auth/admin/approve/{pending.id}").status_code == 403


def test_approve_unknown_account(superadmin_client):
    res = superadmin_client.post("/api/auth/admin/approve/00000000-0000-0000-0000-000000000000")
    assert res.status_code == 404


def test_pending_list_is_superadmin_only(superadmin_client, make_admin):
    make_admin("waiting", role=AdminRole.PENDING.value)
    res = superadmin_client.get("/api/auth/admin/pending")
    assert [a["username"] for a in res.json()] == ["waiting"]


def test_email_link_approves_account(client, make_admin, db_session):
    pending = make_admin(
        "waiting",
        role=AdminRole.PENDING.value,
        approval_token="a" * 64,
        approval_token_expires=datetime.utcnow() + timedelta(hours=1),
    )
    res = client.get("/api/auth/approve/" + "a" * 64)
    assert res.status_code == 200
    assert "Admin approved successfully!" in res.text
    db_session.refresh(pending)
    assert pending.role == "admin"

    reused = client.get("/api/auth/approve/" + "a" * 64)
    assert reused.status_code == 400
    assert "Invalid or expired approval link." in reused.text


def test_expired_email_link(client, make_admin):
    make_admin(
        "late",
        role=AdminRole.PENDING.value,
        approval_token="b" * 64,
        approval_token_expires=datetime.utcnow() - timedelta(minutes=1),
    )
    res = client.get("/api/auth/approve/" + "b" * 64)
    assert res.status_code == 400
    assert "Approval link has expired." in res.text
