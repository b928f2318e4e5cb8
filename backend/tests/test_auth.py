# tests/test_auth.py
from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.auth_identity import AuthIdentity
from taskboard.models.user_profile import UserProfile

from factories import PASSWORD, auth_headers, create_identity, create_member, create_tenant


@pytest.mark.asyncio
async def test_signup_with_employee_code(client, db):
    await create_tenant(db, name="Acme")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/signup",
        json={
            "email": "Jane@Example.com",
            "password": PASSWORD,
            "name": "Jane",
            "company": "Acme",
            "access_code": "EMP1",
        },
    )

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["access_token"]
    assert body["profile"]["role"] == "employee"
    assert body["profile"]["company_id"] == "acme"
    assert body["profile"]["account_state"] == "active"
    assert body["profile"]["pointsStats"] == {"totalEarned": 0, "currentBalance": 0}
    assert body["redirect_to"] == "/acme/dashboard"
    assert body["identity"]["email"] == "jane@example.com"


@pytest.mark.asyncio
async def test_signup_with_manager_code_gets_admin_state(client, db):
    await create_tenant(db, name="Acme")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/signup",
        json={"email": "boss@example.com", "password": PASSWORD, "name": "Boss", "company": "acme", "access_code": "MGR1"},
    )

    assert r.status_code == 201, r.text
    profile = r.json()["profile"]
    assert profile["role"] == "manager"
    assert profile["account_state"] == "admin"
    assert r.json()["redirect_to"] == "/acme/manager/dashboard"


@pytest.mark.asyncio
async def test_signup_with_invalid_code_leaves_no_identity(client, db):
    await create_tenant(db, name="Acme")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/signup",
        json={"email": "ghost@example.com", "password": PASSWORD, "name": "Ghost", "company": "Acme", "access_code": "emp1"},
    )

    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "invalid_access_code"

    identity = (await db.execute(select(AuthIdentity).where(AuthIdentity.email == "ghost@example.com"))).scalar_one_or_none()
    assert identity is None


@pytest.mark.asyncio
async def test_signup_unknown_company_is_404(client):
    r = await client.post(
        "/api/v1/auth/signup",
        json={"email": "x@example.com", "password": PASSWORD, "name": "X", "company": "Nowhere", "access_code": "EMP1"},
    )
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "company_not_found"


@pytest.mark.asyncio
async def test_login_redirects_to_role_dashboard(client, db):
    tenant = await create_tenant(db, name="Acme")
    await create_member(db, tenant, "mgr@example.com", role="manager")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "mgr@example.com", "password": PASSWORD, "company_id": "acme"},
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["redirect_to"] == "/acme/manager/dashboard"
    assert body["role_matches"] is True
    assert body["profile"]["last_login_at"] is not None


@pytest.mark.asyncio
async def test_login_company_mismatch_issues_no_token(client, db):
    acme = await create_tenant(db, name="Acme")
    await create_tenant(db, name="Globex", manager_code="G-M", employee_code="G-E")
    await create_member(db, acme, "jane@example.com")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "jane@example.com", "password": PASSWORD, "company_id": "globex"},
    )

    assert r.status_code == 401
    body = r.json()
    assert body["detail"]["code"] == "company_mismatch"
    assert "access_token" not in body


@pytest.mark.asyncio
@pytest.mark.parametrize("state", ["inactive", "banned"])
async def test_login_blocked_account(client, db, state):
    tenant = await create_tenant(db, name="Acme")
    await create_member(db, tenant, "jane@example.com", account_state=state)
    await db.commit()

    r = await client.post("/api/v1/auth/login", json={"email": "jane@example.com", "password": PASSWORD})

    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "account_inactive"


@pytest.mark.asyncio
async def test_login_role_mismatch_is_not_fatal(client, db):
    tenant = await create_tenant(db, name="Acme")
    await create_member(db, tenant, "jane@example.com")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "jane@example.com", "password": PASSWORD, "expected_role": "manager"},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["role_matches"] is False
    assert body["redirect_to"] == "/acme/dashboard"


@pytest.mark.asyncio
async def test_login_wrong_password(client, db):
    tenant = await create_tenant(db, name="Acme")
    await create_member(db, tenant, "jane@example.com")
    await db.commit()

    r = await client.post("/api/v1/auth/login", json={"email": "jane@example.com", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "invalid_credentials"


@pytest.mark.asyncio
async def test_register_then_complete_profile(client, db):
    await create_tenant(db, name="Acme")
    await db.commit()

    r = await client.post("/api/v1/auth/register", json={"email": "new@example.com", "password": PASSWORD})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["profile"] is None
    assert body["redirect_to"] == "/complete-profile"
    headers = {"Authorization": f"Bearer {body['access_token']}"}

    r = await client.get("/api/v1/session", headers=headers)
    assert r.status_code == 200
    assert r.json()["profile_complete"] is False

    r = await client.post(
        "/api/v1/auth/complete-profile",
        headers=headers,
        json={"company": "Acme", "access_code": "EMP1", "name": "Newbie"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["profile"]["name"] == "Newbie"

    r = await client.get("/api/v1/session", headers=headers)
    session = r.json()
    assert session["profile_complete"] is True
    assert session["redirect_to"] == "/acme/dashboard"


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client, db):
    await create_identity(db, "taken@example.com")
    await db.commit()

    r = await client.post("/api/v1/auth/register", json={"email": "taken@example.com", "password": PASSWORD})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "identity_exists"


@pytest.mark.asyncio
async def test_join_company_validates_code_before_linking(client, db):
    await create_tenant(db, name="Acme")
    await create_identity(db, "solo@example.com", name="Solo")
    await db.commit()

    r = await client.post(
        "/api/v1/auth/join-company",
        json={"email": "solo@example.com", "password": PASSWORD, "company": "Acme", "access_code": "bad"},
    )
    assert r.status_code == 422

    r = await client.post(
        "/api/v1/auth/join-company",
        json={"email": "solo@example.com", "password": PASSWORD, "company": "Acme", "access_code": "MGR1"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["profile"]["role"] == "manager"

    profiles = (await db.execute(select(UserProfile))).scalars().all()
    assert len(profiles) == 1


@pytest.mark.asyncio
async def test_logout_revokes_token(client, db):
    tenant = await create_tenant(db, name="Acme")
    identity, _ = await create_member(db, tenant, "jane@example.com")
    await db.commit()
    headers = auth_headers(identity)

    assert (await client.get("/api/v1/session", headers=headers)).status_code == 200

    r = await client.post("/api/v1/auth/logout", headers=headers)
    assert r.status_code == 204

    r = await client.get("/api/v1/session", headers=headers)
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "token_revoked"


@pytest.mark.asyncio
async def test_route_check_for_session(client, db):
    tenant = await create_tenant(db, name="Acme")
    identity, _ = await create_member(db, tenant, "jane@example.com")
    await db.commit()

    r = await client.post("/api/v1/session/route-check", json={"required_roles": ["manager"]})
    assert r.json() == {"action": "redirect", "target": "/login", "reason": "unauthenticated"}

    r = await client.post(
        "/api/v1/session/route-check",
        headers=auth_headers(identity),
        json={"required_roles": ["manager"], "route_tenant_id": "globex"},
    )
    assert r.json()["target"] == "/acme/dashboard"


@pytest.mark.asyncio
async def test_failed_last_login_stamp_does_not_fail_sign_in(client, db, monkeypatch):
    tenant = await create_tenant(db, name="Acme")
    identity, _ = await create_member(db, tenant, "jane@example.com", name="Jane")
    await db.commit()
    headers = auth_headers(identity)

    async def locked_commit(self):
        raise OperationalError("UPDATE user_profiles", {}, Exception("database is locked"))

    monkeypatch.setattr(AsyncSession, "commit", locked_commit)

    r = await client.get("/api/v1/session", headers=headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["profile_complete"] is True
    assert body["identity"]["email"] == "jane@example.com"
    assert body["profile"]["name"] == "Jane"
    assert body["profile"]["last_login_at"] is None
    assert body["redirect_to"] == "/acme/dashboard"

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "jane@example.com", "password": PASSWORD, "company_id": "acme"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["access_token"]

    monkeypatch.undo()

    r = await client.get("/api/v1/session", headers=headers)
    assert r.json()["profile"]["last_login_at"] is not None
