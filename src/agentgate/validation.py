"""
Input validation for tool arguments.

Pure predicates that native tools run before any side effect. They never
raise; an invalid result carries a message that is returned to the model
verbatim so it can retry with corrected arguments.
"""

import re
from dataclasses import dataclass

MAX_CONTENT_SIZE = 1_000_000
MAX_TIMEOUT_SECONDS = 600

_PATH_SEPARATORS = re.compile(r"[\\/]")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation check."""
    is_valid: bool
    error_message: str | None = None

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message)

    def __bool__(self) -> bool:
        return self.is_valid


def validate_path(path: str | None) -> ValidationResult:
    """Reject blank paths and any path with a '..' segment."""
    if not path or not path.strip():
        return ValidationResult.invalid("Path cannot be empty or blank")

    if ".." in _PATH_SEPARATORS.split(path):
        return ValidationResult.invalid('Path traversal not allowed (path contains "..")')

    return ValidationResult.valid()


def validate_content(content: str | None) -> ValidationResult:
    """Reject empty content and content over MAX_CONTENT_SIZE characters."""
    if not content:
        return ValidationResult.invalid("Content cannot be empty")

    if len(content) > MAX_CONTENT_SIZE:
        return ValidationResult.invalid(
            f"Content exceeds maximum size of {MAX_CONTENT_SIZE} characters (got {len(content)})"
        )

    return ValidationResult.valid()


def validate_command(command: str | None) -> ValidationResult:
    if not command or not command.strip():
        return ValidationResult.invalid("Command cannot be empty or blank")
    return ValidationResult.valid()


def validate_timeout(timeout_seconds: float) -> ValidationResult:
    """Timeouts must be in (0, MAX_TIMEOUT_SECONDS]."""
    if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, (int, float)):
        return ValidationResult.invalid("Timeout must be a number of seconds")

    if timeout_seconds <= 0:
        return ValidationResult.invalid("Timeout must be greater than 0")

    if timeout_seconds > MAX_TIMEOUT_SECONDS:
        return ValidationResult.invalid(
            f"Timeout cannot exceed {MAX_TIMEOUT_SECONDS} seconds (10 minutes)"
        )

    return ValidationResult.valid()
