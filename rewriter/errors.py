"""Exceptions raised by the rewriting pipeline."""

from typing import Optional


class RewriterError(Exception):
    """Base exception for all rewriter errors."""

    error_code = "rewriter_error"


class ProfileValidationError(RewriterError):
    """A profile or profile operation failed validation."""

    error_code = "validation_error"


class SettingsValidationError(RewriterError):
    """A settings value was rejected."""

    error_code = "validation_error"


class ProfileNotFoundError(RewriterError):
    """No profile with the requested id exists in the registry."""

    error_code = "profile_not_found"

    def __init__(self, profile_id: str):
        super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id


class BackendTransportError(RewriterError):
    """The LLM backend could not be reached (connection, DNS, timeout)."""

    error_code = "backend_unreachable"


class BackendProtocolError(RewriterError):
    """The LLM backend answered with a non-2xx status or an unreadable body."""

    error_code = "backend_error"

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: str = ""
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmptyResponseError(RewriterError):
    """The LLM backend returned no choices."""

    error_code = "empty_response"


class RegistryLockError(RewriterError):
    """The profile registry guard could not be acquired."""

    error_code = "internal_error"
