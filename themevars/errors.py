"""Error codes and error handling utilities for Theme Variables Mapper."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any

from themevars.core.host import (
    CollectionNotFoundError,
    DocumentError,
    HostError,
    VariableInUseError,
    VariableNotFoundError,
)
from themevars.core.key_data import KeyDataError
from themevars.core.models import (
    EmptyThemeError,
    IncompleteMappingError,
    InvalidOpacityError,
    InvalidSourceError,
    MissingBlockError,
    ThemeParseError,
    UnresolvableReferenceError,
)


class ErrorCode(Enum):
    """Standardized error codes for mapper operations."""

    # File system errors
    FILE_NOT_FOUND = auto()
    FILE_ACCESS_DENIED = auto()

    # CSS theme errors
    CSS_INVALID_SOURCE = auto()
    CSS_MISSING_BLOCK = auto()
    CSS_EMPTY_THEME = auto()
    CSS_UNRESOLVABLE_REFERENCE = auto()
    CSS_INVALID_OPACITY = auto()
    CSS_INCOMPLETE_MAPPING = auto()

    # Host errors
    COLLECTION_NOT_FOUND = auto()
    VARIABLE_NOT_FOUND = auto()
    VARIABLE_IN_USE = auto()
    DOCUMENT_INVALID = auto()
    KEY_DATA_INVALID = auto()

    # Operation errors
    OPERATION_FAILED = auto()
    OPERATION_PARTIAL = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.FILE_NOT_FOUND: "The file was not found. It may have been moved or deleted.",
    ErrorCode.FILE_ACCESS_DENIED: "Access denied. Check file permissions.",

    ErrorCode.CSS_INVALID_SOURCE: "The selected file does not contain CSS text.",
    ErrorCode.CSS_MISSING_BLOCK: (
        "The CSS needs an @theme block, a :root or .light block, and a .dark block."
    ),
    ErrorCode.CSS_EMPTY_THEME: "The @theme block does not reference any variables.",
    ErrorCode.CSS_UNRESOLVABLE_REFERENCE: (
        "Mode values must be var(--name) or --alpha(var(--name) / N%)."
    ),
    ErrorCode.CSS_INVALID_OPACITY: "Opacity values must be whole percentages from 0 to 100.",
    ErrorCode.CSS_INCOMPLETE_MAPPING: (
        "Every @theme variable needs a value in both the light and the dark block."
    ),

    ErrorCode.COLLECTION_NOT_FOUND: "The collection was not found. Reload collections and try again.",
    ErrorCode.VARIABLE_NOT_FOUND: "A referenced variable does not exist.",
    ErrorCode.VARIABLE_IN_USE: "The variable is still referenced by other variables.",
    ErrorCode.DOCUMENT_INVALID: "The variable document could not be read.",
    ErrorCode.KEY_DATA_INVALID: "The variable key file is not valid exported key data.",

    ErrorCode.OPERATION_FAILED: "Operation failed. See details for more information.",
    ErrorCode.OPERATION_PARTIAL: "Operation completed with some errors. Review the log.",
}

# Most specific first; classification stops at the first isinstance match.
_EXCEPTION_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (InvalidOpacityError, ErrorCode.CSS_INVALID_OPACITY),
    (UnresolvableReferenceError, ErrorCode.CSS_UNRESOLVABLE_REFERENCE),
    (MissingBlockError, ErrorCode.CSS_MISSING_BLOCK),
    (EmptyThemeError, ErrorCode.CSS_EMPTY_THEME),
    (IncompleteMappingError, ErrorCode.CSS_INCOMPLETE_MAPPING),
    (InvalidSourceError, ErrorCode.CSS_INVALID_SOURCE),
    (CollectionNotFoundError, ErrorCode.COLLECTION_NOT_FOUND),
    (VariableNotFoundError, ErrorCode.VARIABLE_NOT_FOUND),
    (VariableInUseError, ErrorCode.VARIABLE_IN_USE),
    (DocumentError, ErrorCode.DOCUMENT_INVALID),
    (KeyDataError, ErrorCode.KEY_DATA_INVALID),
    (FileNotFoundError, ErrorCode.FILE_NOT_FOUND),
    (PermissionError, ErrorCode.FILE_ACCESS_DENIED),
)


@dataclass
class ThemeVarsError(Exception):
    """Base exception with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")
        if not self.suggestion and self.code in ERROR_MESSAGES:
            self.suggestion = ERROR_MESSAGES[self.code]

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"\nFile: {self.path}")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"\nDetails: {details_str}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging or UI display."""
        return {
            "code": self.code.name,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "details": self.details,
            "suggestion": self.suggestion,
        }


def classify_exception(exc: Exception, path: Path | None = None) -> ThemeVarsError:
    """Wrap an exception in a ThemeVarsError with the matching code."""
    if isinstance(exc, ThemeVarsError):
        return exc

    details: dict[str, Any] = {}
    if isinstance(exc, MissingBlockError):
        details["block"] = exc.block
    elif isinstance(exc, IncompleteMappingError):
        details["variable"] = exc.intermediate_name
        details["mode"] = exc.missing_mode
    elif isinstance(exc, UnresolvableReferenceError):
        details["value"] = exc.value

    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exc, exc_type):
            return ThemeVarsError(code, message=str(exc), path=path, details=details)

    if isinstance(exc, (ThemeParseError, HostError)):
        return ThemeVarsError(ErrorCode.OPERATION_FAILED, message=str(exc), path=path)
    return ThemeVarsError(
        ErrorCode.OPERATION_FAILED,
        message=f"{type(exc).__name__}: {exc}",
        path=path,
        details={"original": str(exc)},
    )


def format_error_for_user(error: ThemeVarsError | Exception) -> str:
    """Format an error for display with an actionable suggestion."""
    if isinstance(error, ThemeVarsError):
        parts = [error.message]
        if error.suggestion and error.suggestion != error.message:
            parts.append(f"\n\n{error.suggestion}")
        if error.path:
            parts.append(f"\n\nFile: {error.path.name}")
        return "".join(parts)

    return format_error_for_user(classify_exception(error))
