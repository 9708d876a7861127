"""Exceptions raised while unsubscribing from review-request notifications."""

from typing import Optional


class UnsubscribeError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(UnsubscribeError):
    """A credential or required setting is missing."""


class ValidationError(UnsubscribeError):
    """A user-supplied value (cutoff, reference, team) is malformed."""

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value

    def __str__(self) -> str:
        base_message = super().__str__()
        if self.value is not None:
            return f"{base_message} (value={self.value!r})"
        return base_message


class AuthError(UnsubscribeError):
    """The GitHub API rejected the credential."""


class RateLimitError(UnsubscribeError):
    """The GitHub API rate limit is exhausted."""

    def __init__(self, message: str, reset_at: Optional[str] = None):
        super().__init__(message)
        self.reset_at = reset_at

    def __str__(self) -> str:
        base_message = super().__str__()
        if self.reset_at:
            return f"{base_message} (resets at {self.reset_at})"
        return base_message


class PayloadError(UnsubscribeError):
    """An API payload did not have the expected shape."""


class ActionFailure(UnsubscribeError):
    """Deleting a thread subscription was rejected by the API."""

    def __init__(self, message: str, thread_id: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.thread_id = thread_id
        self.status_code = status_code

    def __str__(self) -> str:
        base_message = super().__str__()
        details = []
        if self.thread_id:
            details.append(f"thread_id={self.thread_id}")
        if self.status_code is not None:
            details.append(f"status_code={self.status_code}")

        if details:
            return f"{base_message} ({', '.join(details)})"
        return base_message
