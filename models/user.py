"""
User data models.

Users are owned by the portal API. The portal only reads them to decide which
views a session may use; the role never changes during a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional

from .timestamps import parse_timestamp, format_timestamp


class UserRole(Enum):
    """Access role, fixed when the account is created."""

    ADMIN = "admin"
    CUSTOMER = "customer"


@dataclass(frozen=True)
class User:
    """A portal account as returned by the API."""

    id: str
    email: str
    name: str
    role: UserRole
    company: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Company name when known, else the person's name."""
        return self.company or self.name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API's field names (also used for cookie storage)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "displayName": self.display_name,
            "company": self.company,
            "role": self.role.value,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=str(data.get("id", "")),
            email=data.get("email", ""),
            name=data.get("name", ""),
            role=UserRole(data.get("role", UserRole.CUSTOMER.value)),
            company=data.get("company") or None,
            created_at=parse_timestamp(data.get("createdAt")),
        )
