"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from typing import Optional
from pydantic import BaseModel, Field


class Identity(BaseModel):
    """
    The signed-in user principal.

    Owned by the authentication backend; the application only holds a
    read-only reference for the lifetime of the session. Every record the
    user creates is stamped with ``id``.
    """

    id: str = Field(..., description="User ID (UUID from Supabase Auth)")
    display_name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="User's email address")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
    }

    @property
    def label(self) -> str:
        """Name to show in the UI."""
        return self.display_name or self.email or self.id
