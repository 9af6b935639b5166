import hashlib
from collections.abc import Callable
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings

ACCESS_TOKEN_COOKIE = "accessToken"


class Role(str, Enum):
    """Supported roles."""

    ADMIN = "admin"
    STUDENT = "student"


class Caller:
    """Authenticated caller reduced to an opaque identity key."""

    def __init__(self, identity: str, roles: tuple[Role, ...]):
        self.identity = identity
        self.roles = roles

    def has_role(self, role: Role) -> bool:
        return role in self.roles


bearer_scheme = HTTPBearer(auto_error=False)


def identity_from_credential(credential: str) -> str:
    """Derive a stable identity key without keeping the credential itself."""

    return hashlib.sha256(credential.encode("utf-8")).hexdigest()


def resolve_caller(credential: str | None, *, admin_token: str | None = None) -> Caller:
    """Return the caller associated with the session credential."""

    if not credential:
        raise HTTPException(status_code=401, detail="Authentication required")

    roles: tuple[Role, ...] = (Role.STUDENT,)
    if admin_token and credential == admin_token:
        roles = (Role.ADMIN, Role.STUDENT)
    return Caller(identity=identity_from_credential(credential), roles=roles)


async def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> Caller:
    """Resolve the caller from the bearer header or the session cookie.

    Session verification belongs to the authentication layer in front of
    this service; here the credential is only turned into a queue identity.
    """

    cached = getattr(request.state, "caller", None)
    if isinstance(cached, Caller):
        return cached

    credential = credentials.credentials if credentials is not None else None
    if not credential:
        credential = request.cookies.get(ACCESS_TOKEN_COOKIE)
    caller = resolve_caller(credential, admin_token=settings.admin_token)
    request.state.caller = caller
    return caller


def role_required(role: Role) -> Callable[[Caller], Caller]:
    """Dependency factory ensuring the current caller has the requested role."""

    async def dependency(caller: Annotated[Caller, Depends(get_current_caller)]) -> Caller:
        if not caller.has_role(role):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return caller

    return dependency


require_admin = role_required(Role.ADMIN)

CurrentCaller = Annotated[Caller, Depends(get_current_caller)]
AdminCaller = Annotated[Caller, Depends(require_admin)]
