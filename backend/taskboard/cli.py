"""
Administrative commands.

    taskboard-admin create-super-admin --email ... --password ...
    taskboard-admin create-tenant "Prime Commerce" [--manager-code X --employee-code Y]
    taskboard-admin list-tenants
    taskboard-admin delete-tenant prime-commerce
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from taskboard.core.errors import DomainError
from taskboard.core.logging import setup_logging
from taskboard.db.session import AsyncSessionLocal, create_sqlite_schema, engine
from taskboard.services import provisioning

log = structlog.get_logger(__name__)


async def _create_super_admin(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        result = await provisioning.bootstrap_super_admin(
            db,
            email=args.email,
            password=args.password,
            name=args.name,
            company_name=args.company,
        )
    if result.created_identity or result.created_profile:
        print(f"Super admin ready: {args.email} ({result.profile.company_id})")
    else:
        print(f"Super admin already exists: {args.email}")
    return 0


async def _create_tenant(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        tenant = await provisioning.create_tenant(
            db,
            name=args.name,
            manager_code=args.manager_code,
            employee_code=args.employee_code,
        )
    print(f"{tenant.id}\tmanager={tenant.manager_code}\temployee={tenant.employee_code}")
    return 0


async def _list_tenants(_args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        tenants = await provisioning.list_tenants(db)
    for t in tenants:
        print(f"{t.id}\t{t.name}\tmanager={t.manager_code}\temployee={t.employee_code}")
    return 0


async def _delete_tenant(args: argparse.Namespace) -> int:
    async with AsyncSessionLocal() as db:
        await provisioning.delete_tenant(db, args.tenant_id)
    print(f"Deleted {args.tenant_id} (users and tasks are kept)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard-admin")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("create-super-admin", help="Create (or confirm) the super admin account")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--name", default="Super Admin")
    p.add_argument("--company", default="Prime Commerce", help="Company the super admin belongs to")
    p.set_defaults(handler=_create_super_admin)

    p = sub.add_parser("create-tenant", help="Create a company")
    p.add_argument("name")
    p.add_argument("--manager-code", default=None)
    p.add_argument("--employee-code", default=None)
    p.set_defaults(handler=_create_tenant)

    p = sub.add_parser("list-tenants", help="List companies and their access codes")
    p.set_defaults(handler=_list_tenants)

    p = sub.add_parser("delete-tenant", help="Delete a company record")
    p.add_argument("tenant_id")
    p.set_defaults(handler=_delete_tenant)

    return parser


async def _run(args: argparse.Namespace) -> int:
    await create_sqlite_schema()
    try:
        return await args.handler(args)
    finally:
        await engine.dispose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except DomainError as e:
        log.error("admin_command_failed", command=args.command, code=e.code, error=e.message)
        print(f"error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
