"""Theme parsing models and errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ThemeParseError(ValueError):
    """Raised when CSS theme text cannot be turned into a mapping table."""


class InvalidSourceError(ThemeParseError):
    """Raised when the supplied text is empty or is not CSS."""


class MissingBlockError(ThemeParseError):
    """Raised when one of the theme, light or dark blocks is absent."""

    def __init__(self, block: str) -> None:
        self.block = block
        super().__init__(f"CSS must contain a {_BLOCK_LABELS.get(block, block)} block")


class EmptyThemeError(ThemeParseError):
    """Raised when the @theme block declares no variable references."""

    def __init__(self) -> None:
        super().__init__("No valid variable mappings found in @theme block")


class UnresolvableReferenceError(ThemeParseError):
    """Raised when a value is neither ``var(--x)`` nor ``--alpha(var(--x) / N%)``."""

    def __init__(self, value: str, reason: str = "") -> None:
        self.value = value
        message = f"Invalid CSS variable reference: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidOpacityError(UnresolvableReferenceError):
    """Raised when an --alpha() opacity is not an integer percentage 0-100."""

    def __init__(self, value: str, opacity: str) -> None:
        self.opacity = opacity
        super().__init__(value, reason=f"opacity {opacity!r} must be an integer from 0 to 100")


class IncompleteMappingError(ThemeParseError):
    """Raised when a theme entry has no light or no dark counterpart."""

    def __init__(self, intermediate_name: str, missing_mode: str) -> None:
        self.intermediate_name = intermediate_name
        self.missing_mode = missing_mode
        super().__init__(
            f"Missing {missing_mode.capitalize()} mode value for {intermediate_name}"
        )


_BLOCK_LABELS = {
    "theme": "@theme",
    "light": ":root or .light",
    "dark": ".dark",
}


class IncompletePolicy(str, Enum):
    """What to do with a theme entry missing from a mode block."""

    ABORT = "abort"
    SKIP = "skip"

    @classmethod
    def coerce(cls, value: IncompletePolicy | str | None) -> IncompletePolicy:
        if isinstance(value, cls):
            return value
        cleaned = (value or "").strip().lower()
        for policy in cls:
            if policy.value == cleaned:
                return policy
        return cls.ABORT


@dataclass(frozen=True, slots=True)
class ThemeBlocks:
    """Raw bodies of the three blocks a theme file must provide."""

    theme: str
    light: str
    dark: str


@dataclass(frozen=True, slots=True)
class ThemeDeclaration:
    """One ``--target: var(--intermediate)`` line of the @theme block."""

    target_name: str
    intermediate_ref: str


@dataclass(frozen=True, slots=True)
class ModeDeclaration:
    """One custom property defined in a light or dark block."""

    property_name: str
    raw_value: str


@dataclass(frozen=True, slots=True)
class VariableMapping:
    """A target variable and the references it aliases in each mode."""

    target_name: str
    light: str
    dark: str
    light_value: str = field(default="", compare=False)
    dark_value: str = field(default="", compare=False)


@dataclass(frozen=True, slots=True)
class ParsedTheme:
    """Result of parsing one theme file."""

    mappings: tuple[VariableMapping, ...]
    sentiment: str | None = None
    skipped: tuple[str, ...] = ()
