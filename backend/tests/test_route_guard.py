# tests/test_route_guard.py
from __future__ import annotations

from types import SimpleNamespace

import pytest

from taskboard.core.route_guard import (
    DECISION_PLACEHOLDER,
    DECISION_REDIRECT,
    DECISION_RENDER,
    dashboard_path_for,
    evaluate_route,
)

IDENTITY = SimpleNamespace(uid="u1")


def profile(role: str = "employee", company_id: str = "acme", is_super_admin: bool = False):
    return SimpleNamespace(role=role, company_id=company_id, is_super_admin=is_super_admin)


def test_loading_renders_placeholder_before_anything_else():
    d = evaluate_route(identity=None, profile=None, loading=True, required_roles=["manager"])
    assert d.action == DECISION_PLACEHOLDER
    assert d.target is None


def test_unauthenticated_goes_to_tenant_login_when_route_has_tenant():
    d = evaluate_route(identity=None, profile=None, route_tenant_id="acme")
    assert (d.action, d.target) == (DECISION_REDIRECT, "/acme/login")


def test_unauthenticated_goes_to_generic_login():
    d = evaluate_route(identity=None, profile=None)
    assert (d.action, d.target) == (DECISION_REDIRECT, "/login")


def test_identity_without_profile_goes_to_profile_completion():
    d = evaluate_route(identity=IDENTITY, profile=None, required_roles=["employee"])
    assert (d.action, d.target) == (DECISION_REDIRECT, "/complete-profile")


def test_super_admin_route_sends_others_home():
    d = evaluate_route(identity=IDENTITY, profile=profile("admin"), require_super_admin=True)
    assert (d.action, d.target) == (DECISION_REDIRECT, "/")


def test_employee_on_manager_route_lands_on_own_dashboard():
    d = evaluate_route(
        identity=IDENTITY,
        profile=profile("employee", company_id="acme"),
        required_roles=["manager"],
        route_tenant_id="globex",
    )
    assert d.action == DECISION_REDIRECT
    # built from the profile's company, never the attempted route's
    assert d.target == "/acme/dashboard"
    assert d.target != "/acme/manager/dashboard"


def test_matching_role_renders():
    d = evaluate_route(identity=IDENTITY, profile=profile("manager"), required_roles=["manager", "admin"])
    assert d.action == DECISION_RENDER
    assert d.renders


@pytest.mark.parametrize(
    "p, expected",
    [
        (profile("admin", is_super_admin=True), "/superadmin/dashboard"),
        (profile("admin"), "/acme/admin/dashboard"),
        (profile("manager"), "/acme/manager/dashboard"),
        (profile("employee"), "/acme/dashboard"),
    ],
)
def test_dashboard_paths(p, expected):
    assert dashboard_path_for(p) == expected


@pytest.mark.parametrize("role", ["employee", "manager", "admin"])
def test_redirect_target_is_accepted_by_the_guard(role):
    p = profile(role)
    other_roles = [r for r in ("employee", "manager", "admin") if r != role]
    first = evaluate_route(identity=IDENTITY, profile=p, required_roles=other_roles)
    assert first.action == DECISION_REDIRECT

    # the role's own dashboard requires exactly that role
    second = evaluate_route(identity=IDENTITY, profile=p, required_roles=[role])
    assert second.renders
