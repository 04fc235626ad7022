"""Auth guard: resolve the caller's external identity id.

Session tokens are RS256 JWTs issued by the identity provider. They are
verified against the provider's JWKS (keys cached by PyJWKClient); the `sub`
claim is the external identity id. Every failure raises UnauthorizedError so
callers fail closed.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

import jwt
from fastapi import Header
from jwt import PyJWKClient

from careercoach.config import get_settings
from careercoach.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        raise UnauthorizedError(detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError(detail="Expected a Bearer token")
    return token


class SessionTokenVerifier:
    """Verifies provider session JWTs and returns their claims."""

    def __init__(
        self,
        jwks_url: str,
        issuer: Optional[str] = None,
        jwks_client: Optional[PyJWKClient] = None,
        leeway: float = 5.0,
    ) -> None:
        self.issuer = issuer
        self.leeway = leeway
        self._jwks = jwks_client or PyJWKClient(jwks_url, cache_keys=True, lifespan=3600)

    def verify(self, token: str) -> dict[str, Any]:
        try:
            signing_key = self._jwks.get_signing_key_from_jwt(token)
            options = {"require": ["exp", "sub"], "verify_aud": False}
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options=options,
                leeway=self.leeway,
            )
        except jwt.PyJWTError as e:
            logger.info("Rejected session token: %s", e)
            raise UnauthorizedError(detail=f"Invalid session token: {type(e).__name__}") from e

        if not isinstance(claims.get("sub"), str) or not claims["sub"]:
            raise UnauthorizedError(detail="Session token has no subject")
        return claims

    def resolve_user_id(self, authorization: Optional[str]) -> str:
        """Full guard: header -> verified token -> external identity id."""
        return self.verify(extract_bearer_token(authorization))["sub"]


@lru_cache(maxsize=1)
def get_token_verifier() -> SessionTokenVerifier:
    settings = get_settings()
    return SessionTokenVerifier(jwks_url=settings.jwks_url, issuer=settings.clerk_issuer)


def get_current_user_id(authorization: Optional[str] = Header(default=None)) -> str:
    """FastAPI dependency yielding the caller's external identity id.

    The header is checked before the verifier is built, so requests without
    credentials are rejected even when JWKS settings are missing.
    """
    token = extract_bearer_token(authorization)
    return get_token_verifier().verify(token)["sub"]
