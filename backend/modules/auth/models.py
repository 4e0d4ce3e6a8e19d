"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from shared.models import Identity


class AuthState(str, Enum):
    """Lifecycle of the session."""

    PENDING = "pending"          # Waiting for the first auth-state event
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


class JWTPayload(BaseModel):
    """
    Decoded access token payload from Supabase Auth.

    This matches the structure of Supabase Auth JWTs.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="User role")

    # Supabase-specific claims
    app_metadata: dict = Field(default_factory=dict)
    user_metadata: dict = Field(default_factory=dict)

    def to_identity(self) -> Identity:
        return Identity(
            id=self.sub,
            email=self.email,
            display_name=display_name_from_metadata(self.user_metadata),
        )


def display_name_from_metadata(metadata: Optional[dict]) -> Optional[str]:
    """
    Pick the display name out of Supabase user metadata.

    Email signups store it under ``display_name``; OAuth providers fill in
    ``full_name`` or ``name``.
    """
    if not metadata:
        return None
    for key in ("display_name", "full_name", "name"):
        value = metadata.get(key)
        if value:
            return str(value)
    return None
