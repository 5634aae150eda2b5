"""
Caller identity helpers used by every action.

The session is never looked up globally: the HTTP layer builds an
:class:`AuthContext` once per request with :func:`get_auth_context` and
threads it explicitly into actions and RPC procedures.  The ``require_*``
helpers are pure reads of that context and raise before any validation
or persistence happens.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from .exceptions import Forbidden, NoOrganization, Unauthenticated
from .models import User


@dataclass(frozen=True)
class AuthContext:
    user_id: Optional[int] = None
    org_id: Optional[str] = None
    role: str = User.ROLE_MEMBER
    is_super_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = AuthContext()


def _is_super_admin_user(user: User) -> bool:
    if user.role == User.ROLE_SUPERADMIN:
        return True
    org = user.organization
    if org is None:
        return False
    return bool(org.is_super_admin or (
        settings.SUPER_ADMIN_ORGANIZATION_ID and org.external_id == settings.SUPER_ADMIN_ORGANIZATION_ID
    ))


def auth_context_for_user(user: Optional[User]) -> AuthContext:
    if user is None or not getattr(user, 'is_authenticated', False):
        return ANONYMOUS
    return AuthContext(
        user_id=user.id,
        org_id=str(user.organization_id) if user.organization_id else None,
        role=user.role,
        is_super_admin=_is_super_admin_user(user),
    )


def get_auth_context(request) -> AuthContext:
    """Return the context for the authenticated user on a DRF request."""
    return auth_context_for_user(getattr(request, 'user', None))


def require_auth(ctx: AuthContext) -> AuthContext:
    if not ctx.is_authenticated:
        raise Unauthenticated()
    return ctx


def require_org(ctx: AuthContext) -> AuthContext:
    require_auth(ctx)
    if not ctx.org_id:
        raise NoOrganization()
    return ctx


def require_super_admin(ctx: AuthContext) -> AuthContext:
    require_auth(ctx)
    if not ctx.is_super_admin:
        raise Forbidden()
    return ctx
