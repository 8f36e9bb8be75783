from __future__ import annotations

from typing import Mapping

from ..core.exceptions import AuthenticationError
from .model import EmployeeIdentity


def identity_from_session(session: Mapping) -> EmployeeIdentity:
    """Read the employee snapshot stored in the session at login time."""

    employee_id = session.get("employee_id")
    if not employee_id:
        raise AuthenticationError("Unauthorized")

    return EmployeeIdentity(
        employee_id=str(employee_id),
        name=str(session.get("name") or ""),
        email=str(session.get("email") or ""),
        mobile=str(session.get("mobile") or ""),
    )
