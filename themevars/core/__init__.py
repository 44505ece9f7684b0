"""Theme parsing and variable mapping core."""

from themevars.core.css_theme import (
    assemble,
    extract_blocks,
    load_theme_file,
    parse_declarations,
    parse_theme,
    parse_theme_css,
    resolve_reference,
)
from themevars.core.models import (
    IncompleteMappingError,
    IncompletePolicy,
    InvalidOpacityError,
    MissingBlockError,
    ParsedTheme,
    ThemeParseError,
    UnresolvableReferenceError,
    VariableMapping,
)
from themevars.core.naming import resolve_candidate_names

__all__ = [
    "IncompleteMappingError",
    "IncompletePolicy",
    "InvalidOpacityError",
    "MissingBlockError",
    "ParsedTheme",
    "ThemeParseError",
    "UnresolvableReferenceError",
    "VariableMapping",
    "assemble",
    "extract_blocks",
    "load_theme_file",
    "parse_declarations",
    "parse_theme",
    "parse_theme_css",
    "resolve_candidate_names",
    "resolve_reference",
]
