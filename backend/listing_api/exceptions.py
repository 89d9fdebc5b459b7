"""Domain errors raised by the services and translated to HTTP responses in `main`."""

from __future__ import annotations


class ListingApiError(Exception):
    """Base exception for all listing-api errors."""


class DuplicateEmail(ListingApiError):
    """Raised when registering an email that already has an account."""


class UnknownEmail(ListingApiError):
    """Raised when logging in with an email that has no account."""


class BadPassword(ListingApiError):
    """Raised when the password does not match the stored hash."""


class NotFound(ListingApiError):
    """Raised when a referenced user or property does not exist."""


class ValidationError(ListingApiError):
    """Raised when a payload violates the entity's shape constraints."""


class MissingToken(ListingApiError):
    """Raised when no Authorization header was sent."""


class InvalidToken(ListingApiError):
    """Raised when the bearer token is malformed, expired or signed with another secret."""


class UploadError(ListingApiError):
    """Raised when the media host rejects or fails an upload."""


class SearchError(ListingApiError):
    """Raised when the search index is unreachable or answers with an error."""


class ServerError(ListingApiError):
    """Unclassified server-side failure."""
