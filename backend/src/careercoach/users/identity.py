"""Identity provider client.

Fetches a user's profile from the Clerk backend API so a local record can be
provisioned on first sight. Every failure mode maps to an explicit
IdentityProviderError subclass:

- 404                         -> IdentityNotFoundError
- network error / timeout     -> IdentityUpstreamUnavailableError
- any other non-2xx status    -> IdentityUpstreamUnavailableError
- non-JSON or non-object body -> IdentityMalformedResponseError
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from careercoach.config import Settings
from careercoach.exceptions import (
    IdentityMalformedResponseError,
    IdentityNotFoundError,
    IdentityUpstreamUnavailableError,
)
from careercoach.users.schemas import IdentityProfile

logger = logging.getLogger(__name__)


def parse_identity_profile(payload: dict[str, Any]) -> IdentityProfile:
    """Map a provider user object onto IdentityProfile.

    Missing fields default to empty email, empty name and no avatar. Values of
    the wrong type are treated as missing.
    """
    email = ""
    addresses = payload.get("email_addresses")
    if isinstance(addresses, list) and addresses:
        first = addresses[0]
        if isinstance(first, dict) and isinstance(first.get("email_address"), str):
            email = first["email_address"]

    name = payload.get("first_name")
    image_url = payload.get("image_url")

    return IdentityProfile(
        email=email,
        name=name if isinstance(name, str) else "",
        image_url=image_url if isinstance(image_url, str) and image_url else None,
    )


class IdentityClient:
    """Thin httpx wrapper around GET /v1/users/{id}."""

    def __init__(
        self,
        api_base: str,
        secret_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self._secret_key = secret_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityClient":
        return cls(
            api_base=settings.clerk_api_base,
            secret_key=settings.clerk_secret_key.get_secret_value(),
            timeout=settings.identity_timeout_seconds,
        )

    def fetch_user(self, external_id: str) -> IdentityProfile:
        """Fetch and parse the provider's profile for external_id."""
        url = f"{self.api_base}/v1/users/{external_id}"
        headers = {"Authorization": f"Bearer {self._secret_key}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Identity provider request failed for %s: %s", external_id, e)
            raise IdentityUpstreamUnavailableError(
                detail=f"{type(e).__name__}: {e}",
            ) from e

        if response.status_code == 404:
            raise IdentityNotFoundError(detail=f"external_id={external_id}")
        if not response.is_success:
            logger.warning(
                "Identity provider returned %s for %s",
                response.status_code,
                external_id,
            )
            raise IdentityUpstreamUnavailableError(
                detail=f"HTTP {response.status_code} from {url}",
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise IdentityMalformedResponseError(detail=f"Invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise IdentityMalformedResponseError(
                detail=f"Expected a JSON object, got {type(payload).__name__}",
            )

        return parse_identity_profile(payload)
