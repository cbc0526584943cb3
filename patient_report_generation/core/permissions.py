"""
Capabilities for Patient Document Operations

Handlers receive an explicit Capabilities object instead of consulting a
global "current role" flag. The object is derived from the caller's role
and optional per-user grants.

Role Matrix:
    ┌────────────┬──────────────────┬─────────────────┬──────────────┐
    │ Role       │ generate docs    │ view background │ edit billing │
    ├────────────┼──────────────────┼─────────────────┼──────────────┤
    │ doctor     │ yes              │ yes             │ yes          │
    │ secretary  │ no (grantable)   │ no (grantable)  │ grantable    │
    └────────────┴──────────────────┴─────────────────┴──────────────┘

Author: Shubham Singh
Date: January 2026
"""

from dataclasses import dataclass, fields, replace
from typing import Optional

from patient_report_generation.core.enums import Role
from patient_report_generation.core.exceptions import PermissionDeniedError


@dataclass(frozen=True)
class Capabilities:
    """
    What the current caller is allowed to do.

    Attributes:
        can_generate_documents: May request summaries and reports
        can_view_background: May see background information in prompts
        can_edit_billing: May modify billing details
        role: Role the capabilities were derived from (for error context)
    """

    can_generate_documents: bool = False
    can_view_background: bool = False
    can_edit_billing: bool = False
    role: Optional[Role] = None

    @classmethod
    def for_role(cls, role: Role, **grants: bool) -> "Capabilities":
        """
        Build capabilities for a role, applying explicit grants on top.

        Args:
            role: Staff role of the caller
            **grants: Capability overrides, e.g. can_edit_billing=True

        Raises:
            ValueError: If a grant names an unknown capability
        """
        if role == Role.DOCTOR:
            base = cls(
                can_generate_documents=True,
                can_view_background=True,
                can_edit_billing=True,
                role=role,
            )
        else:
            base = cls(role=role)

        known = {f.name for f in fields(cls) if f.name != "role"}
        unknown = [name for name in grants if name not in known]
        if unknown:
            raise ValueError(f"Unknown capabilities: {unknown}")

        return replace(base, **grants)

    @classmethod
    def full_access(cls) -> "Capabilities":
        """Capabilities for trusted internal callers (CLI, batch jobs)."""
        return cls.for_role(Role.DOCTOR)

    def require(self, capability: str) -> None:
        """
        Raise if the named capability is not granted.

        Raises:
            PermissionDeniedError: If the capability is missing or unknown
        """
        if not getattr(self, capability, False):
            raise PermissionDeniedError(
                capability, role=self.role.value if self.role else None
            )
