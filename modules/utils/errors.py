"""Error types shared by the tools."""

from __future__ import annotations


class ValidationError(ValueError):
    """Invalid or missing user input, detected before any request is made."""


class ProviderError(RuntimeError):
    """A hosted provider answered with an error status or error payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProcessingError(RuntimeError):
    """A local decode, transform or document operation failed."""


def require_text(value: str | None, message: str) -> str:
    """Return the stripped value or raise ValidationError when it is blank."""
    stripped = (value or "").strip()
    if not stripped:
        raise ValidationError(message)
    return stripped
