# testgen/validator.py
"""
Input validation for generation requests.

validate_input(code, language) -> ValidationError | None

Runs before any record is created, so rejected input never leaves state behind.
The language length bound (MAX_LANGUAGE_LENGTH) is enforced by the request
schema at the HTTP boundary and is not repeated here.
"""

from typing import Any, Optional

from testgen.errors import ValidationError

MAX_CODE_LENGTH = 50_000
MAX_LANGUAGE_LENGTH = 64


def validate_input(code: Any, language: Any) -> Optional[ValidationError]:
    if not code or not isinstance(code, str):
        return ValidationError("Code is required and must be a non-empty string.")
    trimmed = code.strip()
    if len(trimmed) == 0:
        return ValidationError("Code cannot be blank.")
    if len(trimmed) > MAX_CODE_LENGTH:
        return ValidationError(f"Code must not exceed {MAX_CODE_LENGTH} characters.")

    if not language or not isinstance(language, str):
        return ValidationError("Language is required and must be a non-empty string.")
    if len(language.strip()) == 0:
        return ValidationError("Language cannot be blank.")

    return None


def normalize_language(language: str) -> str:
    """Canonical form stored on the record."""
    return language.strip().lower()
