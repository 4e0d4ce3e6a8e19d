"""
Shared infrastructure for Freelance Desk.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- handles: Cancellable listener handles

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    FreelanceDeskError,
    AuthenticationError,
    ExternalServiceError,
)
from .handles import ListenerHandle, ListenerRegistry
from .models import Identity

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "FreelanceDeskError",
    "AuthenticationError",
    "ExternalServiceError",
    "ListenerHandle",
    "ListenerRegistry",
    "Identity",
]
