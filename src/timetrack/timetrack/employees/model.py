from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EmployeeIdentity:
    """Authenticated caller as supplied by the identity provider.

    Note: The attendance core trusts this snapshot and never re-validates it.
    """

    employee_id: str
    name: str
    email: str
    mobile: str = ""
