# testgen/errors.py
"""
Error taxonomy for the generation pipeline.

Every error carries a stable error_code and the HTTP status the API layer
maps it to, so handlers never need to inspect the message text.
"""

from typing import Optional


class GenerationError(Exception):
    error_code = "E_INTERNAL"
    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self):
        return {"status": "error", "error_code": self.error_code, "message": self.message}


class ValidationError(GenerationError):
    """Caller supplied malformed input. Raised before any record exists."""
    error_code = "E_VALIDATION"
    status_code = 400


class ConfigurationError(GenerationError):
    """Operator fault: missing credential or unsupported provider."""
    error_code = "E_CONFIGURATION"
    status_code = 503


class UpstreamError(GenerationError):
    """The provider backend failed or returned something unusable."""
    error_code = "E_UPSTREAM"
    status_code = 503


class EmptyResponseError(UpstreamError):
    error_code = "E_EMPTY_RESPONSE"


class NotFoundError(GenerationError):
    error_code = "E_NOT_FOUND"
    status_code = 404


class StatusTransitionError(GenerationError):
    """A status write was attempted on a record that is no longer pending."""
    error_code = "E_INVALID_TRANSITION"
    status_code = 409
