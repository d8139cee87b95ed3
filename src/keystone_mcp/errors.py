"""Exception hierarchy for the Keystone v2 token client."""
from __future__ import annotations


class KeystoneError(Exception):
    """Base class for everything this package raises."""


# ---------------------------------------------------------------------------
# Credential preconditions (raised before any request is sent)
# ---------------------------------------------------------------------------


class AuthOptionsError(KeystoneError):
    """Auth options cannot be turned into a v2 token request."""

    message = "invalid auth options"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class APIKeyProvidedError(AuthOptionsError):
    message = "APIKey is not supported by identity v2; use a username and password"


class UserIDProvidedError(AuthOptionsError):
    message = "UserID is not supported by identity v2; use a username instead"


class DomainIDProvidedError(AuthOptionsError):
    message = "DomainID is not supported by identity v2"


class DomainNameProvidedError(AuthOptionsError):
    message = "DomainName is not supported by identity v2"


class UsernameRequiredError(AuthOptionsError):
    message = "a username is required to authenticate with identity v2"


class PasswordRequiredError(AuthOptionsError):
    message = "a password is required to authenticate with identity v2"


# ---------------------------------------------------------------------------
# Transport and decoding
# ---------------------------------------------------------------------------


class KeystoneAPIError(KeystoneError):
    """Raised for unexpected HTTP responses from the identity service."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"Keystone API error {status_code}: {message}")


class TokenDecodeError(KeystoneError):
    """The token response does not have the expected shape."""


# ---------------------------------------------------------------------------
# Endpoint location
# ---------------------------------------------------------------------------


class EndpointLocateError(KeystoneError):
    pass


class EndpointNotFoundError(EndpointLocateError):
    pass


class MultipleEndpointsFoundError(EndpointLocateError):
    pass
