from __future__ import annotations

import pytest
from sqlmodel import Session, select

from glassworks.model.account import Account, AccountRole
from glassworks.model.audit_log import AuditLog
from glassworks.services.identity_store import IdentityStore


def _bearer(response):
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(engine, register, login):
    account_id = register(email="admin@example.com")["account_id"]
    with Session(engine) as session:
        store = IdentityStore(session)
        account = store.get(account_id)
        version = account.version
        account.role = AccountRole.ADMIN
        store.update(account, expected_version=version)

    r = login(email="admin@example.com", device_id="admin-desk")
    assert r.status_code == 200, r.text
    return _bearer(r)


@pytest.fixture
def owner(register, login):
    account_id = register()["account_id"]
    r = login(device_id="phone-a")
    assert r.status_code == 200, r.text
    return {"id": account_id, "headers": _bearer(r)}


def test_admin_clears_device_session(client, engine, admin_headers, owner, login):
    assert login(device_id="laptop-b").status_code == 409

    r = client.post(f"/admin/clear-device/{owner['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["success"] is True

    with Session(engine) as session:
        account = session.get(Account, owner["id"])
        assert account.active_session is None
        # Only the session ends; the pinned device stays.
        assert account.pinned_device_id == "phone-a"
        events = session.exec(
            select(AuditLog).where(AuditLog.event_type == "admin_clear_device")
        ).all()
        assert [e.account_id for e in events] == [owner["id"]]

    assert client.get("/auth/me", headers=owner["headers"]).json()["error"]["code"] == "SESSION_REVOKED"
    assert login(device_id="laptop-b").status_code == 200


def test_admin_clears_device_by_email(client, admin_headers, owner, login):
    r = client.post("/admin/clear-device-by-email", headers=admin_headers, json={"email": "Owner@Example.com"})
    assert r.status_code == 200
    assert "owner@example.com" in r.json()["message"]
    assert login(device_id="laptop-b").status_code == 200


def test_admin_clear_unknown_account(client, admin_headers):
    r = client.post("/admin/clear-device/9999", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"

    r = client.post("/admin/clear-device-by-email", headers=admin_headers, json={"email": "nobody@example.com"})
    assert r.status_code == 404


def test_clear_device_requires_admin(client, owner, login):
    r = client.post(f"/admin/clear-device/{owner['id']}", headers=owner["headers"])
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "HTTP_403"
    # Nothing changed: the other device still conflicts.
    assert login(device_id="laptop-b").status_code == 409


def test_clear_device_requires_token(client, owner):
    assert client.post(f"/admin/clear-device/{owner['id']}").status_code == 401
