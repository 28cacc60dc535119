from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from dropfiles.config import Settings

bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# Mint a token for a client (device or user) allowed to browse the upload catalog
def create_access_token(subject: str, settings: Settings, expires_delta: timedelta = None) -> str:
    issued = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": subject, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# Router dependency; lets everything through unless AUTH_ENABLED is set
def require_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
):
    settings = request.app.state.settings
    if not settings.AUTH_ENABLED:
        return None
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        return jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")
