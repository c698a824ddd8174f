"""Authentication principals and authorization dependencies.

Both credential schemes (bearer tokens with role claims and the reseller
API key) resolve to a ``Principal`` tagged with capabilities. Routes
declare the capabilities they accept with ``require_capabilities``.
"""

import hmac
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from fastapi import HTTPException, Request, status

from loja.infrastructure.config import settings


class Role(str, Enum):
    """User roles carried in bearer tokens."""

    ADMIN = "admin"
    CUSTOMER = "customer"


class PrincipalKind(str, Enum):
    """How a principal authenticated."""

    USER = "user"
    SERVICE = "service"


RESELLER_CAPABILITY = "reseller"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller.

    Attributes:
        subject: User name or service identity.
        kind: Credential scheme the principal came from.
        capabilities: Roles of a user, or the capabilities of a service.
    """

    subject: str
    kind: PrincipalKind
    capabilities: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_token_claims(cls, claims: dict[str, Any]) -> "Principal":
        """Build a user principal from decoded bearer token claims."""
        roles = claims.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return cls(
            subject=str(claims["sub"]),
            kind=PrincipalKind.USER,
            capabilities=frozenset(str(r) for r in roles),
        )

    @classmethod
    def reseller(cls) -> "Principal":
        """Build the service principal for the reseller API key."""
        return cls(
            subject="reseller",
            kind=PrincipalKind.SERVICE,
            capabilities=frozenset({RESELLER_CAPABILITY}),
        )

    def allows(self, accepted: frozenset[str]) -> bool:
        """Check whether the principal holds any accepted capability."""
        return not self.capabilities.isdisjoint(accepted)


@dataclass(frozen=True)
class AuthFailure:
    """Credentials that were presented but could not be verified.

    Attributes:
        error_code: Machine-readable error code of the 401 response.
        message: Human-readable error message.
        scheme: Value of the ``WWW-Authenticate`` header.
    """

    error_code: str
    message: str
    scheme: str = "Bearer"


def verify_api_key(candidate: str) -> bool:
    """Compare an API key with the configured reseller key in constant time."""
    return hmac.compare_digest(candidate.encode(), settings.reseller_api_key.encode())


def get_principal(request: Request) -> Principal | None:
    """Get the principal resolved by the authentication middleware."""
    return getattr(request.state, "principal", None)


def require_capabilities(*accepted: str) -> Callable[[Request], Principal]:
    """Build a dependency that admits principals holding any accepted capability.

    Args:
        accepted: Role names or service capabilities.

    Returns:
        FastAPI dependency returning the authorized principal.
    """
    accepted_set = frozenset(str(getattr(c, "value", c)) for c in accepted)

    def dependency(request: Request) -> Principal:
        principal = get_principal(request)
        failure: AuthFailure | None = getattr(request.state, "auth_failure", None)

        if failure is not None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={
                    "error_code": failure.error_code,
                    "message": failure.message,
                },
                headers={"WWW-Authenticate": failure.scheme},
            )

        if principal is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={
                    "error_code": "UNAUTHORIZED",
                    "message": "Authentication required",
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not principal.allows(accepted_set):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error_code": "FORBIDDEN",
                    "message": "Not allowed to access this resource",
                },
            )

        return principal

    return dependency
