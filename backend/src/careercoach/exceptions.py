"""careercoach exception hierarchy.

All exceptions inherit from CareerCoachError and carry a three-part structure:
message (what happened), detail (technical context), suggestion (what to do next).
"""


class CareerCoachError(Exception):
    """Base exception for all careercoach errors."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class UnauthorizedError(CareerCoachError):
    """Raised when no caller identity can be resolved."""

    def __init__(
        self,
        message: str = "Unauthorized",
        detail: str | None = None,
        suggestion: str | None = "Sign in again to obtain a fresh session token",
    ) -> None:
        super().__init__(message, detail, suggestion)


class DatabaseError(CareerCoachError):
    """Error related to database operations."""

    def __init__(
        self,
        message: str = "A database error occurred",
        detail: str | None = None,
        suggestion: str | None = "Check database connectivity",
    ) -> None:
        super().__init__(message, detail, suggestion)


class IdentityProviderError(CareerCoachError):
    """Base for failures while fetching a user from the identity provider."""

    def __init__(
        self,
        message: str = "Identity provider request failed",
        detail: str | None = None,
        suggestion: str | None = "Check the identity provider status and secret key",
    ) -> None:
        super().__init__(message, detail, suggestion)


class IdentityNotFoundError(IdentityProviderError):
    """The identity provider has no user with the requested id."""

    def __init__(
        self,
        message: str = "User not found at identity provider",
        detail: str | None = None,
        suggestion: str | None = "The account may have been deleted; sign in again",
    ) -> None:
        super().__init__(message, detail, suggestion)


class IdentityUpstreamUnavailableError(IdentityProviderError):
    """Network failure, timeout, or non-success status from the provider."""

    def __init__(
        self,
        message: str = "Identity provider unavailable",
        detail: str | None = None,
        suggestion: str | None = "Retry later",
    ) -> None:
        super().__init__(message, detail, suggestion)


class IdentityMalformedResponseError(IdentityProviderError):
    """The provider answered with a body that is not a JSON object."""

    def __init__(
        self,
        message: str = "Identity provider returned a malformed response",
        detail: str | None = None,
        suggestion: str | None = "Check the identity provider API version",
    ) -> None:
        super().__init__(message, detail, suggestion)


class InsightGenerationError(CareerCoachError):
    """Raised when the AI insight generator fails or returns unusable output."""

    def __init__(
        self,
        message: str = "Industry insight generation failed",
        detail: str | None = None,
        suggestion: str | None = "Check the OpenAI API key and model configuration",
    ) -> None:
        super().__init__(message, detail, suggestion)


class TransactionTimeoutError(CareerCoachError):
    """Raised when the profile update exceeds its time budget."""

    def __init__(
        self,
        message: str = "Profile update exceeded its time budget",
        detail: str | None = None,
        suggestion: str | None = "Retry the update; the insight may be cached by then",
    ) -> None:
        super().__init__(message, detail, suggestion)


class ProfileUpdateError(CareerCoachError):
    """Stable error surfaced to callers when a profile update fails.

    The underlying failure is attached as __cause__.
    """

    def __init__(
        self,
        message: str = "Failed to update profile",
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message, detail, suggestion)
