# tests/test_tenants.py
from __future__ import annotations

import pytest
from sqlalchemy import select

from taskboard.models.user_profile import UserProfile
from taskboard.services.provisioning import bootstrap_super_admin

from factories import auth_headers, create_member, create_tenant


async def super_admin(db):
    home = await create_tenant(db, name="Prime Commerce", manager_code="PM", employee_code="PE")
    identity, _ = await create_member(db, home, "root@example.com", role="admin", is_super_admin=True)
    await db.commit()
    return identity


@pytest.mark.asyncio
async def test_create_tenant_generates_codes(client, db):
    root = await super_admin(db)

    r = await client.post("/api/v1/tenants", headers=auth_headers(root), json={"name": "  Acme   Corp "})

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["id"] == "acme-corp"
    assert body["name"] == "Acme   Corp"
    assert body["manager_code"] != body["employee_code"]
    assert body["manager_code"].isupper() or body["manager_code"].isdigit()


@pytest.mark.asyncio
async def test_create_tenant_with_explicit_codes(client, db):
    root = await super_admin(db)
    headers = auth_headers(root)

    r = await client.post("/api/v1/tenants", headers=headers, json={"name": "Acme", "manager_code": "MGR1", "employee_code": "EMP1"})
    assert r.status_code == 201
    assert (r.json()["manager_code"], r.json()["employee_code"]) == ("MGR1", "EMP1")

    r = await client.post("/api/v1/tenants", headers=headers, json={"name": "ACME"})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "tenant_exists"

    r = await client.post("/api/v1/tenants", headers=headers, json={"name": "Globex", "manager_code": "X", "employee_code": "X"})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "access_codes_not_distinct"

    r = await client.post("/api/v1/tenants", headers=headers, json={"name": "Globex", "manager_code": "X"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_provisioning_is_super_admin_only(client, db):
    tenant = await create_tenant(db, name="Acme")
    admin, _ = await create_member(db, tenant, "admin@example.com", role="admin")
    await db.commit()

    r = await client.post("/api/v1/tenants", headers=auth_headers(admin), json={"name": "Globex"})
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "super_admin_required"

    r = await client.get("/api/v1/tenants")
    assert r.status_code in (401, 403)


@pytest.mark.asyncio
async def test_delete_tenant_keeps_members(client, db):
    root = await super_admin(db)
    acme = await create_tenant(db, name="Acme")
    await create_member(db, acme, "emp@example.com")
    await db.commit()

    r = await client.delete("/api/v1/tenants/acme", headers=auth_headers(root))
    assert r.status_code == 204

    r = await client.get("/api/v1/tenants", headers=auth_headers(root))
    assert [t["id"] for t in r.json()] == ["prime-commerce"]

    left = (await db.execute(select(UserProfile).where(UserProfile.company_id == "acme"))).scalars().all()
    assert len(left) == 1

    r = await client.delete("/api/v1/tenants/acme", headers=auth_headers(root))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_public_lookup_hides_codes(client, db):
    await create_tenant(db, name="Acme")
    await db.commit()

    r = await client.get("/api/v1/tenants/ACME/public")
    assert r.status_code == 200
    assert r.json() == {"id": "acme", "name": "Acme"}

    r = await client.get("/api/v1/tenants/nowhere/public")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_bootstrap_super_admin_is_idempotent(db):
    first = await bootstrap_super_admin(db, email="root@example.com", password="secret-pass")
    assert first.created_tenant and first.created_identity and first.created_profile
    assert first.profile.is_super_admin
    assert first.profile.company_id == "prime-commerce"

    second = await bootstrap_super_admin(db, email="root@example.com", password="other-pass")
    assert not (second.created_tenant or second.created_identity or second.created_profile)
    assert second.profile.uid == first.profile.uid

    profiles = (await db.execute(select(UserProfile))).scalars().all()
    assert len(profiles) == 1
