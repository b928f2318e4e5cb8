from __future__ import annotations

import re
import secrets

ACCESS_CODE_LENGTH = 8
_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
_WS_RE = re.compile(r"\s+")


def slugify_company(value: str | None) -> str:
    """'  Prime   Commerce ' -> 'prime-commerce'"""
    v = (value or "").strip().lower()
    return _WS_RE.sub("-", v)


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_code_pair() -> tuple[str, str]:
    manager_code = generate_access_code()
    employee_code = generate_access_code()
    while employee_code == manager_code:
        employee_code = generate_access_code()
    return manager_code, employee_code


def match_access_code(code: str, *, manager_code: str, employee_code: str) -> str | None:
    """
    Exact, case-sensitive match. Returns the role the code grants or None.
    Both comparisons always run so timing does not reveal which one failed.
    """
    is_manager = secrets.compare_digest(code.encode(), manager_code.encode())
    is_employee = secrets.compare_digest(code.encode(), employee_code.encode())
    if is_manager:
        return "manager"
    if is_employee:
        return "employee"
    return None
