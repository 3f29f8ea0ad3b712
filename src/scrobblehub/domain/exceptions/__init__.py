"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # The *args lets subclasses pass extra context. This is your base class - DON'T raise it directly!
    # Always use a specific subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(DomainException):
    """Raised when a value fails validation rules."""

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when required configuration is missing or invalid.
    """

    pass


class ExternalServiceError(DomainException):
    """External service (Subsonic, Spotify, etc.) returned an error."""

    pass


class AuthenticationError(DomainException):
    """Credentials were rejected or could not be verified."""

    pass


# =============================================================================
# Source resolution errors
# Hey future me - every one of these is CONTAINED to the smallest unit it came
# from (one file, one entry, one lifecycle step). Only ConfigParseError is
# allowed to abort a whole resolution pass!
# =============================================================================


class ConfigParseError(ConfigurationError):
    """The combined config document could not be parsed.

    Fatal to the whole resolution pass.
    """

    def __init__(self, path: str, reason: str | None = None) -> None:
        message = f"{path} could not be parsed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class FileReadError(ConfigurationError):
    """A per-type config file could not be read or has an unusable shape.

    Only that file is skipped, siblings keep going.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path} {reason}")
        self.path = path
        self.reason = reason


class StructuralValidationError(ValidationException):
    """A config entry is missing required structure."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class UnknownSourceTypeError(ConfigurationError):
    """No adapter is registered for a source type tag.

    Should never happen for entries that went through the loader - the set of
    types is closed - so this signals an internal inconsistency.
    """

    def __init__(self, source_type: Any) -> None:
        super().__init__(f"Source of type {source_type} was not recognized")
        self.source_type = source_type


class ConstructionError(ConfigurationError):
    """An adapter refused to be built from its config."""

    def __init__(self, source_type: str, message: str) -> None:
        super().__init__(message)
        self.source_type = source_type


class InitializationFailure(DomainException):
    """An adapter reported it is not ready for activity capture."""

    def __init__(self, source_name: str, reason: str | None = None) -> None:
        message = f"({source_name}) source failed to initialize"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source_name = source_name
        self.reason = reason


class AuthenticationFailure(AuthenticationError):
    """An adapter's credential check failed.

    Never excludes a source from the registry - it stays un-authed.
    """

    def __init__(self, source_name: str, reason: str | None = None) -> None:
        message = f"({source_name}) source auth failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source_name = source_name
        self.reason = reason


# =============================================================================
# Public API - All exceptions that can be imported
# =============================================================================
__all__ = [
    # Base
    "DomainException",
    "ValidationException",
    "ConfigurationError",
    "ExternalServiceError",
    "AuthenticationError",
    # Source resolution
    "ConfigParseError",
    "FileReadError",
    "StructuralValidationError",
    "UnknownSourceTypeError",
    "ConstructionError",
    "InitializationFailure",
    "AuthenticationFailure",
]
