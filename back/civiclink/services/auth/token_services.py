# Standard library imports
from datetime import UTC, datetime, timedelta
from uuid import uuid4

# Third-party imports
import jwt

# Local application imports
from civiclink.core.exceptions import UnauthorizedError
from civiclink.schemas.users.user_schemas import Viewer
from civiclink.settings import settings


def create_access_token(viewer: Viewer, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token carrying the viewer's identity claims.

    Tokens are normally issued by the identity service; this is used by
    tooling and tests that need to act as a given user.

    Args:
        viewer: The identity to encode
        expires_delta: Optional custom expiration time

    Returns:
        The encoded token
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": viewer.id,  # Standard JWT claim for subject
        "name": viewer.name,
        "avatar": viewer.avatar_ref,
        "is_admin": viewer.is_admin,
        "exp": expire,
        "iat": now,
        "token_type": "access",  # nosec B106
        "jti": str(uuid4()),
    }

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Viewer:
    """
    Verify an access token and build the ``Viewer`` it identifies.

    Raises:
        UnauthorizedError: If the token is expired, malformed or has no subject
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Session has expired, please sign in again")
    except jwt.PyJWTError:
        raise UnauthorizedError("Could not validate credentials")

    if payload.get("token_type", "access") != "access":  # nosec B105
        raise UnauthorizedError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token: missing subject")

    return Viewer(
        id=str(user_id),
        name=payload.get("name") or "",
        avatar_ref=payload.get("avatar"),
        is_admin=bool(payload.get("is_admin", False)),
    )
