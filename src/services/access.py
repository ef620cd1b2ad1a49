"""Role checks for admin-only operations."""

import sqlite3
from dataclasses import dataclass

from core import store
from core.config import ADMIN_ROLE
from core.errors import AuthError


@dataclass(frozen=True)
class Actor:
    """Authenticated band member making a request."""

    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def resolve_actor(conn: sqlite3.Connection, user_id: str | None) -> Actor:
    """Look up the caller's role; unknown or inactive members are rejected."""
    if not user_id:
        raise AuthError("Missing user identity")
    member = store.get_member(conn, user_id)
    if member is None or not member["active"]:
        raise AuthError(f"Unknown or inactive member: {user_id}")
    return Actor(user_id=member["user_id"], role=member["role"])


def require_admin(actor: Actor, action: str) -> None:
    if not actor.is_admin:
        raise AuthError(f"Only app admins can {action}")
