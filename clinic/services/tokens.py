from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from clinic.config import settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(ValueError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    session_id: str
    kind: str
    role: Optional[str] = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in_seconds: int
    refresh_expires_in_seconds: int


def lifetime(kind: str) -> timedelta:
    if kind == ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    if kind == REFRESH:
        return timedelta(days=settings.refresh_token_expire_days)
    raise TokenError(f"Unknown token kind: {kind}")


def issue_token(
    kind: str, user_id: int, session_id: str, role: Optional[str] = None
) -> str:
    if not settings.jwt_secret:
        raise TokenError("JWT secret is not configured")
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "sid": session_id,
        "type": kind,
        "iat": issued_at,
        "exp": issued_at + lifetime(kind),
    }
    if role is not None:
        claims["role"] = role
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def issue_pair(user_id: int, session_id: str, role: str) -> TokenPair:
    return TokenPair(
        access_token=issue_token(ACCESS, user_id, session_id, role),
        refresh_token=issue_token(REFRESH, user_id, session_id),
        expires_in_seconds=int(lifetime(ACCESS).total_seconds()),
        refresh_expires_in_seconds=int(lifetime(REFRESH).total_seconds()),
    )


def read_token(token: str, kind: str) -> TokenClaims:
    """Decode and validate a token of the given kind.

    Raises ``TokenError`` for anything a client could have gotten wrong:
    missing, expired, tampered, wrong kind, or a malformed subject.
    """
    if not token:
        raise TokenError("Token is missing")
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "sid", "type", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.MissingRequiredClaimError as exc:
        raise TokenError(f"Token is missing the '{exc.claim}' claim") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc
    if claims["type"] != kind:
        raise TokenError("Invalid token type")
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise TokenError("Invalid token subject") from exc
    return TokenClaims(
        user_id=user_id,
        session_id=claims["sid"],
        kind=kind,
        role=claims.get("role"),
    )
