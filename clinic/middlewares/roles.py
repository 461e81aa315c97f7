from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from clinic.schemas.users import Role
from clinic.services.sessions import session_store
from clinic.services.tokens import ACCESS, TokenClaims, TokenError, read_token
from clinic.services.users import user_store


@dataclass(frozen=True)
class CurrentUser:
    id: int
    username: str
    role: Role


def unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise unauthorized("Giriş yapmanız gerekiyor")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise unauthorized("Invalid Authorization header")
    return token


def token_claims(token: str, kind: str) -> TokenClaims:
    try:
        return read_token(token, kind)
    except TokenError as exc:
        raise unauthorized(str(exc)) from exc


def get_current_user(authorization: str | None = Header(default=None)) -> CurrentUser:
    claims = token_claims(bearer_token(authorization), ACCESS)
    if session_store.resolve(claims.session_id) != claims.user_id:
        raise unauthorized("Invalid session token")
    user = user_store.get_user(claims.user_id)
    if user is None:
        raise unauthorized("Giriş yapılmamış")
    return CurrentUser(id=user.id, username=user.username, role=Role(user.role))


def require_roles(*roles: Role):
    """Dependency that admits only the listed roles.

    The role comes from the stored user rather than the token, so a role
    change made by an admin applies on the caller's next request.
    """
    allowed = frozenset(roles)

    def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if allowed and user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Bu işlem için yetkiniz yok",
            )
        return user

    return dependency


ADMIN_ONLY = (Role.ADMIN,)
FRONT_DESK = (Role.ADMIN, Role.RECEPTIONIST)
CLINICAL = (Role.ADMIN, Role.THERAPIST)
STAFF = (Role.ADMIN, Role.THERAPIST, Role.RECEPTIONIST)
