from conftest import PASSWORD

from acrossmedia.auth import verify_password
from acrossmedia.models import SiteSetting


def test_settings_created_with_defaults_on_first_read(admin_client, db_session):
    assert db_session.query(SiteSetting).count() == 0
    res = admin_client.get("/api/settings")
    assert res.status_code == 200
    body = res.json()
    assert body["siteName"] == "AcrossMedia Admin"
    assert body["theme"] == "dark"
    assert body["emailNotifications"] is True
    assert body["autoApprove"] is False
    assert body["maxFileSize"] == 10
    assert body["allowedFileTypes"] == ["jpg", "jpeg", "png", "gif", "mp4", "mov", "avi"]
    assert db_session.query(SiteSetting).count() == 1

    admin_client.get("/api/settings")
    assert db_session.query(SiteSetting).count() == 1


def test_only_superadmin_updates_settings(admin_client):
    assert admin_client.put("/api/settings", json={"theme": "light"}).status_code == 403


def test_partial_settings_update(superadmin_client, superadmin):
    res = superadmin_client.put("/api/settings", json={"siteName": "AcrossMedia", "emailNotifications": False})
    assert res.status_code == 200
    body = res.json()
    assert body["siteName"] == "AcrossMedia"
    assert body["emailNotifications"] is False
    assert body["theme"] == "dark"
    assert body["updatedBy"] == superadmin.id


def test_settings_validation(superadmin_client):
    assert superadmin_client.put("/api/settings", json={"theme": "neon"}).status_code == 400
    assert superadmin_client.put("/api/settings", json={"maxFileSize": 0}).status_code == 400


def test_disabled_notifications_skip_registration_email(client, superadmin, db_session, monkeypatch):
    from acrossmedia.routers import admin_auth

    sent = []
    monkeypatch.setattr(admin_auth, "send_approval_request_email", lambda *args: sent.append(args))
    db_session.add(SiteSetting(type="site", email_notifications=False))
    db_session.commit()

    body = {"username": "quiet", "email": "quiet@acrossmedia.test", "password": PASSWORD}
    assert client.post("/api/auth/admin/register", json=body).status_code == 201
    assert sent == []


def test_registration_emails_superadmin(client, superadmin, monkeypatch):
    from acrossmedia.routers import admin_auth

    sent = []
    monkeypatch.setattr(admin_auth, "send_approval_request_email", lambda *args: sent.append(args))
    body = {"username": "loud", "email": "loud@acrossmedia.test", "password": PASSWORD}
    assert client.post("/api/auth/admin/register", json=body).status_code == 201
    assert len(sent) == 1
    assert sent[0][0] == superadmin.email
    assert sent[0][1] == "loud"


# ---------- Profile ----------


def test_read_profile(admin_client):
    body = admin_client.get("/api/settings/profile").json()
    assert body["username"] == "editor"
    assert "password" not in body


def test_update_username_and_email(admin_client, admin_user, db_session):
    res = admin_client.put("/api/settings/profile", json={"username": "chief-editor", "email": "Chief@AcrossMedia.test"})
    assert res.status_code == 200
    assert res.json()["username"] == "chief-editor"
    assert res.json()["email"] == "chief@acrossmedia.test"


def test_profile_uniqueness(admin_client, make_admin):
    make_admin("taken")
    res = admin_client.put("/api/settings/profile", json={"username": "taken"})
    assert res.status_code == 400
    assert res.json()["message"] == "Username is already taken"
    res = admin_client.put("/api/settings/profile", json={"email": "taken@acrossmedia.test"})
    assert res.json()["message"] == "Email is already taken"


def test_password_change_requires_current_password(admin_client, admin_user, db_session):
    res = admin_client.put("/api/settings/profile", json={"newPassword": "N3w!Portal"})
    assert res.json()["message"] == "Current password is required to set new password"
    res = admin_client.put(
        "/api/settings/profile",
        json={"currentPassword": "Wrong!Pass9", "newPassword": "N3w!Portal"},
    )
    assert res.json()["message"] == "Current password is incorrect"

    res = admin_client.put(
        "/api/settings/profile",
        json={"currentPassword": PASSWORD, "newPassword": "N3w!Portal"},
    )
    assert res.status_code == 200
    db_session.refresh(admin_user)
    assert verify_password("N3w!Portal", admin_user.password)


def test_weak_new_password_rejected(admin_client):
    res = admin_client.put("/api/settings/profile", json={"currentPassword": PASSWORD, "newPassword": "password"})
    assert res.status_code == 400
    assert res.json()["type"] == "VALIDATION_ERROR"


def test_no_changes(admin_client):
    res = admin_client.put("/api/settings/profile", json={"username": "editor"})
    assert res.status_code == 400
    assert res.json()["message"] == "No changes to update"
