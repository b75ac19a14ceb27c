"""Authenticated caller context, populated by the auth interceptor.

The interceptor only populates this context. Procedures decide what they need
with the ``require_*`` helpers or the matching FastAPI dependencies.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from src.household.core.exceptions import Code, ConnectError
from src.household.models.enums import MembershipRole

_auth_context: ContextVar["AuthContext | None"] = ContextVar("auth_context", default=None)


@dataclass(frozen=True)
class AuthContext:
    """Immutable context for an authenticated RPC call.

    Attributes:
        user_id: The caller's user id
        family_id: The family the session is bound to, or None
        role: The caller's role in that family, or None
        session_id: The session that authenticated the call
        tenant_db: Engine for the family's database, or None without a family
    """

    user_id: str
    session_id: str
    family_id: str | None = None
    role: str | None = None
    tenant_db: AsyncEngine | None = None

    @property
    def is_manager(self) -> bool:
        return self.role == MembershipRole.MANAGER.value


def set_auth_context(ctx: AuthContext) -> None:
    _auth_context.set(ctx)


def get_auth_context() -> AuthContext | None:
    return _auth_context.get()


def clear_auth_context() -> None:
    _auth_context.set(None)


def _check_auth(ctx: AuthContext | None) -> AuthContext:
    if ctx is None:
        raise ConnectError(Code.UNAUTHENTICATED, "Authentication required")
    return ctx


def _check_family(ctx: AuthContext | None) -> AuthContext:
    ctx = _check_auth(ctx)
    if not ctx.family_id or ctx.tenant_db is None:
        raise ConnectError(Code.FAILED_PRECONDITION, "User is not a member of a family")
    return ctx


def _check_manager(ctx: AuthContext | None) -> AuthContext:
    ctx = _check_family(ctx)
    if not ctx.is_manager:
        raise ConnectError(Code.PERMISSION_DENIED, "Family manager role required")
    return ctx


def require_auth() -> AuthContext:
    """Return the caller's context or fail with ``unauthenticated``."""
    return _check_auth(get_auth_context())


def require_family() -> AuthContext:
    """Require a session bound to a family. Fails with ``failed_precondition``."""
    return _check_family(get_auth_context())


def require_family_manager() -> AuthContext:
    """Require the family manager role. Fails with ``permission_denied``."""
    return _check_manager(get_auth_context())


# FastAPI dependencies read the context the interceptor left on request.state


def get_current_auth(request: Request) -> AuthContext:
    return _check_auth(getattr(request.state, "auth", None))


def get_family_auth(request: Request) -> AuthContext:
    return _check_family(getattr(request.state, "auth", None))


def get_manager_auth(request: Request) -> AuthContext:
    return _check_manager(getattr(request.state, "auth", None))


CurrentAuth = Annotated[AuthContext, Depends(get_current_auth)]
FamilyAuth = Annotated[AuthContext, Depends(get_family_auth)]
ManagerAuth = Annotated[AuthContext, Depends(get_manager_auth)]
