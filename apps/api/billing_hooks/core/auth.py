import logging
from dataclasses import dataclass, field

from jose import JWTError, jwt
from starlette.requests import Request

from billing_hooks.core.config import get_settings


logger = logging.getLogger("billing_hooks.auth")

ANONYMOUS_SUBJECT = "anonymous"


@dataclass
class AuthUser:
    sub: str
    roles: list[str] = field(default_factory=list)


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(request: Request) -> AuthUser:
    token = _bearer_token(request)
    if token is None:
        return AuthUser(sub=ANONYMOUS_SUBJECT)

    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.warning("auth.invalid_token", extra={"error": str(exc)})
        return AuthUser(sub=ANONYMOUS_SUBJECT)

    roles = claims.get("roles")
    return AuthUser(
        sub=str(claims.get("sub") or ANONYMOUS_SUBJECT),
        roles=[str(role) for role in roles] if isinstance(roles, list) else [],
    )
