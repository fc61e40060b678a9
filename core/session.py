"""
Portal session context.

Holds the tokens and the signed-in user for one browser session. The object is
passed explicitly to the API client and to the workspace; nothing reads it
from a module-level global.

Lifecycle:
    1. Created at login from the API's login response
    2. Restored at request start from the persisted Flask cookie (from_dict)
    3. Tokens rotated in place by the API client after a refresh
    4. Torn down at logout or when a refresh fails (teardown)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from models.user import User, UserRole


class PortalSession:
    """
    Authentication state for one browser session.

    Attributes:
        access_token: Bearer token sent with every API call
        refresh_token: Token used once to obtain a new access token on 401
        user: The signed-in user, or None after teardown
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        user: Optional[User] = None,
    ):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.user = user
        # Bumped on every token change so callers can persist only when needed
        self.revision = 0

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token) and self.user is not None

    @property
    def role(self) -> Optional[UserRole]:
        return self.user.role if self.user else None

    def has_role(self, role: UserRole) -> bool:
        return self.is_authenticated and self.user.role == role

    def set_tokens(self, access_token: str, refresh_token: str) -> None:
        """Replace both tokens (login or refresh)."""
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.revision += 1

    def teardown(self) -> None:
        """Forget tokens and user. The session cannot be used afterwards."""
        self.access_token = None
        self.refresh_token = None
        self.user = None
        self.revision += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for cookie storage."""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "user": self.user.to_dict() if self.user else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PortalSession":
        """Restore from the persisted cookie payload (empty session if absent)."""
        if not data:
            return cls()
        user_data = data.get("user")
        return cls(
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            user=User.from_api(user_data) if user_data else None,
        )

    def __repr__(self) -> str:
        who = self.user.email if self.user else "anonymous"
        return f"PortalSession(user={who!r}, authenticated={self.is_authenticated})"
