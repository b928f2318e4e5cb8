# taskboard/core/roles.py

import enum


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class AccountState(str, enum.Enum):
    """Can this user sign in at all."""

    ACTIVE = "active"
    ADMIN = "admin"  # managers/admins are provisioned with this state
    INACTIVE = "inactive"
    BANNED = "banned"


class Presence(str, enum.Enum):
    """What the user is doing right now."""

    IDLE = "idle"
    AVAILABLE = "available"
    BUSY = "busy"
    REQUESTING_TASK = "requesting_task"


class TaskStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    VERIFICATION_PENDING = "verification_pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AttachmentType(str, enum.Enum):
    FILE = "file"
    LINK = "link"


class JoinRequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


BLOCKED_ACCOUNT_STATES = {AccountState.INACTIVE.value, AccountState.BANNED.value}

# Roles allowed to run the manager side of the task workflow.
TASK_MANAGER_ROLES = {Role.MANAGER.value, Role.ADMIN.value}


def normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def default_account_state(role: str) -> str:
    return AccountState.ACTIVE.value if normalize_role(role) == Role.EMPLOYEE.value else AccountState.ADMIN.value
