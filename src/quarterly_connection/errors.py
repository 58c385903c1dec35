"""Custom exception types for the quarterly connection report generator."""


class QuarterlyConnectionError(Exception):
    """Base exception for all recoverable report generator errors."""


class InvalidQuarter(QuarterlyConnectionError):
    """Raised when a quarter label is not one of Q1, Q2, Q3 or Q4."""


class ConfigurationError(QuarterlyConnectionError):
    """Raised when runtime configuration values are missing or invalid."""


class ApiError(QuarterlyConnectionError):
    """Raised when a Jira or GitHub API request fails."""


class TransportError(ApiError):
    """Raised on connection failures and timeouts."""


class AuthError(ApiError):
    """Raised when the remote API rejects the supplied token."""


class DecodeError(ApiError):
    """Raised when an API response body does not have the expected shape."""


class IncompleteResult(DecodeError):
    """Raised when an API reports more results than could be retrieved."""


class PartialDetailFailure(QuarterlyConnectionError):
    """Raised when enriching a single record fails; callers default and continue."""
