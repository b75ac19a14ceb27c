"""Request context management for API layer.

Provides context variables for tracking request-scoped state:
- AuthContext: the authenticated caller, their family and tenant database
"""

from src.household.api.context.auth_context import (
    AuthContext,
    CurrentAuth,
    FamilyAuth,
    ManagerAuth,
    clear_auth_context,
    get_auth_context,
    get_current_auth,
    get_family_auth,
    get_manager_auth,
    require_auth,
    require_family,
    require_family_manager,
    set_auth_context,
)

__all__ = [
    "AuthContext",
    "CurrentAuth",
    "FamilyAuth",
    "ManagerAuth",
    "clear_auth_context",
    "get_auth_context",
    "get_current_auth",
    "get_family_auth",
    "get_manager_auth",
    "require_auth",
    "require_family",
    "require_family_manager",
    "set_auth_context",
]
