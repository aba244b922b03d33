# session.py
"""
Explicit session context.

The signed-in identity is passed to the pipeline as a value instead of
being read from a process-wide singleton. The engine itself never looks
at it; only the record-store calls made by analysis.py need user_id.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

ROLE_CLIENT = "client"
ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    email: Optional[str] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)
    access_token: Optional[str] = None

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_staff(self) -> bool:
        return self.has_role(ROLE_ADMIN) or self.has_role(ROLE_STAFF)


def anonymous_session(user_id: str = "local-user") -> SessionContext:
    """Session used when the app runs without an identity provider."""
    return SessionContext(user_id=user_id, roles=frozenset({ROLE_CLIENT}))
