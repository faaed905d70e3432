# backend/agenda/auth.py
"""
Caller identity.

Sessions are verified upstream by the auth gateway, which forwards only the
normalised identity: X-User-ID and X-User-Role (client | provider).
"""

from dataclasses import dataclass

from fastapi import Header

from .errors import Forbidden, NotAuthenticated

ROLES = ("client", "provider")


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str

    @property
    def is_provider(self) -> bool:
        return self.role == "provider"


def get_identity(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Identity:
    if not x_user_id or not x_user_role:
        raise NotAuthenticated()
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise NotAuthenticated("Malformed identity") from None
    if x_user_role not in ROLES:
        raise NotAuthenticated("Unknown role")
    return Identity(user_id=user_id, role=x_user_role)


def require_provider(identity: Identity, provider_id: int) -> None:
    """The caller must be this provider."""
    if not identity.is_provider or identity.user_id != provider_id:
        raise Forbidden("Only the provider can do this")
