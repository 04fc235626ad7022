"""Tests for the identity provider client.

Uses httpx.MockTransport so requests never leave the process. Validates
defensive parsing and the mapping of every failure to an explicit variant.
"""

import httpx
import pytest

from careercoach.exceptions import (
    IdentityMalformedResponseError,
    IdentityNotFoundError,
    IdentityProviderError,
    IdentityUpstreamUnavailableError,
)
from careercoach.users.identity import IdentityClient, parse_identity_profile


def _client(handler) -> IdentityClient:
    return IdentityClient(
        api_base="https://api.clerk.test/",
        secret_key="sk_test_123",
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


class TestParseIdentityProfile:
    """parse_identity_profile defaults."""

    def test_full_payload(self):
        profile = parse_identity_profile({
            "email_addresses": [{"email_address": "ada@example.com"}, {"email_address": "alt@example.com"}],
            "first_name": "Ada",
            "image_url": "https://img.example.com/ada.png",
        })
        assert profile.email == "ada@example.com"
        assert profile.name == "Ada"
        assert profile.image_url == "https://img.example.com/ada.png"

    def test_missing_fields_default(self):
        profile = parse_identity_profile({})
        assert profile.email == ""
        assert profile.name == ""
        assert profile.image_url is None

    def test_null_and_wrong_types_default(self):
        profile = parse_identity_profile({
            "email_addresses": [],
            "first_name": None,
            "image_url": "",
        })
        assert profile.email == ""
        assert profile.name == ""
        assert profile.image_url is None

    def test_email_entry_without_address(self):
        profile = parse_identity_profile({"email_addresses": [{"id": "idn_1"}]})
        assert profile.email == ""


class TestFetchUser:
    """IdentityClient.fetch_user against a mocked transport."""

    def test_success_sends_bearer_secret(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={
                "email_addresses": [{"email_address": "ada@example.com"}],
                "first_name": "Ada",
            })

        profile = _client(handler).fetch_user("user_abc")

        assert seen["url"] == "https://api.clerk.test/v1/users/user_abc"
        assert seen["auth"] == "Bearer sk_test_123"
        assert profile.email == "ada@example.com"
        assert profile.name == "Ada"
        assert profile.image_url is None

    def test_404_is_not_found(self):
        client = _client(lambda request: httpx.Response(404, json={"errors": []}))
        with pytest.raises(IdentityNotFoundError):
            client.fetch_user("user_missing")

    @pytest.mark.parametrize("status", [401, 429, 500, 503])
    def test_other_errors_are_unavailable(self, status):
        client = _client(lambda request: httpx.Response(status, text="nope"))
        with pytest.raises(IdentityUpstreamUnavailableError) as exc_info:
            client.fetch_user("user_abc")
        assert str(status) in exc_info.value.detail

    def test_network_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(IdentityUpstreamUnavailableError) as exc_info:
            _client(handler).fetch_user("user_abc")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout_is_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(IdentityUpstreamUnavailableError):
            _client(handler).fetch_user("user_abc")

    def test_invalid_json_is_malformed(self):
        client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(IdentityMalformedResponseError):
            client.fetch_user("user_abc")

    def test_non_object_json_is_malformed(self):
        client = _client(lambda request: httpx.Response(200, json=["not", "an", "object"]))
        with pytest.raises(IdentityMalformedResponseError):
            client.fetch_user("user_abc")

    def test_variants_share_base(self):
        assert issubclass(IdentityNotFoundError, IdentityProviderError)
        assert issubclass(IdentityUpstreamUnavailableError, IdentityProviderError)
        assert issubclass(IdentityMalformedResponseError, IdentityProviderError)
