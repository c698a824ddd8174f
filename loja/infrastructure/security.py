"""Bearer token issuance and validation.

Tokens are HS256 JWTs signed with the configured secret key. The ``roles``
claim lists the role names granted to the subject.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from loja.infrastructure.config import settings


def create_access_token(
    subject: str,
    roles: Iterable[str],
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed access token.

    Args:
        subject: Token subject (user name or identifier).
        roles: Role names embedded in the ``roles`` claim.
        expires_delta: Token lifetime; defaults to the configured TTL.

    Returns:
        Encoded JWT.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_ttl_minutes)

    now = datetime.now(timezone.utc)
    claims = {
        "sub": subject,
        "roles": list(roles),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Validate a token signature and expiry.

    Args:
        token: Encoded JWT.

    Returns:
        Decoded claims.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired or
            signed with another key.
    """
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
