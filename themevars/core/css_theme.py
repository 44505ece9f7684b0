"""CSS theme parsing: @theme / light / dark blocks into variable mappings.

A theme file declares target variables in an ``@theme`` block that point at
intermediate custom properties, which the light (``:root`` / ``.light``) and
dark (``.dark``) blocks define in terms of palette variables::

    @theme inline { --color-fill-danger: var(--fill-danger); }
    :root, .light { --fill-danger: var(--color-red-500); }
    .dark { --fill-danger: --alpha(var(--color-red-700) / 90%); }

parses to ``color/fill/danger`` aliasing ``color/red/500`` in light mode and
``color/red/700_90`` in dark mode.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, Mapping

import tinycss2

from themevars.core.models import (
    EmptyThemeError,
    IncompleteMappingError,
    IncompletePolicy,
    InvalidOpacityError,
    InvalidSourceError,
    MissingBlockError,
    ModeDeclaration,
    ParsedTheme,
    ThemeBlocks,
    ThemeDeclaration,
    UnresolvableReferenceError,
    VariableMapping,
)
from themevars.core.sentiment import detect_sentiment

logger = logging.getLogger(__name__)

_PLAIN_VAR_RE = re.compile(r"var\s*\(\s*--([\w-]+)\s*\)")
_ALPHA_RE = re.compile(
    r"--alpha\s*\(\s*var\s*\(\s*--([\w-]+)\s*\)\s*/\s*([^%()]*?)\s*%\s*\)"
)
_OPACITY_RE = re.compile(r"\d{1,3}")

_MAX_THEME_FILE_BYTES = 512 * 1024


def extract_blocks(source: str) -> ThemeBlocks:
    """Return the bodies of the first @theme, light and dark blocks."""
    theme: str | None = None
    light: str | None = None
    dark: str | None = None

    rules = tinycss2.parse_stylesheet(source, skip_comments=True, skip_whitespace=True)
    for rule in _walk_rules(rules):
        if rule.type in ("at-rule", "qualified-rule") and rule.content is not None:
            _check_closed(rule.content)
        if rule.type == "at-rule":
            if rule.lower_at_keyword == "theme" and theme is None and rule.content is not None:
                theme = tinycss2.serialize(rule.content)
            continue
        if rule.type != "qualified-rule":
            continue
        selectors = _split_selectors(rule.prelude)
        if dark is None and any(_has_class(sel, "dark") for sel in selectors):
            dark = tinycss2.serialize(rule.content)
        elif light is None and _is_light_selector_list(selectors):
            light = tinycss2.serialize(rule.content)

    if theme is None:
        raise MissingBlockError("theme")
    if light is None:
        raise MissingBlockError("light")
    if dark is None:
        raise MissingBlockError("dark")
    return ThemeBlocks(theme=theme, light=light, dark=dark)


def parse_declarations(body: str, *, custom_only: bool = True) -> dict[str, str]:
    """Split a block body into ``{property: value}`` in source order.

    With ``custom_only`` set, properties that are not ``--`` custom properties
    are dropped. The first declaration of a duplicated property is kept.
    Nested rules and malformed entries are skipped.
    """
    declarations: dict[str, str] = {}
    for decl in tinycss2.parse_declaration_list(body, skip_comments=True, skip_whitespace=True):
        if decl.type != "declaration":
            continue
        if custom_only and not decl.name.startswith("--"):
            continue
        _check_closed(decl.value)
        value = tinycss2.serialize(
            [token for token in decl.value if token.type != "comment"]
        ).strip()
        declarations.setdefault(decl.name, value)
    return declarations


def theme_declarations(declarations: Mapping[str, str]) -> list[ThemeDeclaration]:
    """Build theme entries from parsed @theme declarations."""
    entries: list[ThemeDeclaration] = []
    for name, value in declarations.items():
        match = _PLAIN_VAR_RE.fullmatch(value.strip())
        if match is None:
            logger.debug("ignoring non-reference theme declaration %s: %s", name, value)
            continue
        entries.append(
            ThemeDeclaration(
                target_name=_to_path(name),
                intermediate_ref=f"--{match.group(1)}",
            )
        )
    if not entries:
        raise EmptyThemeError()
    return entries


def mode_declarations(declarations: Mapping[str, str]) -> list[ModeDeclaration]:
    return [
        ModeDeclaration(property_name=name, raw_value=value)
        for name, value in declarations.items()
        if name.startswith("--")
    ]


def resolve_reference(raw_value: str) -> str:
    """Translate a mode value into a slash-delimited variable name.

    ``var(--color-red-500)`` becomes ``color/red/500``; the alpha form
    ``--alpha(var(--color-red-500) / 5%)`` becomes ``color/red/500_05``.
    Full opacity carries no suffix.
    """
    value = raw_value.strip()

    match = _ALPHA_RE.fullmatch(value)
    if match is not None:
        base = _to_path(match.group(1))
        opacity = match.group(2)
        if not _OPACITY_RE.fullmatch(opacity) or int(opacity) > 100:
            raise InvalidOpacityError(raw_value, opacity)
        percent = int(opacity)
        if percent == 100:
            return base
        return f"{base}_{percent:02d}"

    match = _PLAIN_VAR_RE.fullmatch(value)
    if match is not None:
        return _to_path(match.group(1))

    raise UnresolvableReferenceError(raw_value)


def assemble(
    theme: Iterable[ThemeDeclaration] | Mapping[str, str],
    light: Mapping[str, str],
    dark: Mapping[str, str],
    *,
    on_incomplete: IncompletePolicy | str = IncompletePolicy.ABORT,
) -> list[VariableMapping]:
    """Join theme entries with their light and dark values."""
    mappings, _skipped = _assemble(theme, light, dark, IncompletePolicy.coerce(on_incomplete))
    return mappings


def parse_theme(
    source: str,
    *,
    on_incomplete: IncompletePolicy | str = IncompletePolicy.ABORT,
) -> list[VariableMapping]:
    """Parse CSS theme text into an ordered list of variable mappings.

    Empty text, or markup instead of CSS, raises ``InvalidSourceError`` before
    any block is looked for; a source that is CSS but lacks one of the three
    blocks raises ``MissingBlockError``. Both derive from ``ThemeParseError``.
    """
    return list(parse_theme_css(source, on_incomplete=on_incomplete).mappings)


def parse_theme_css(
    source: str,
    *,
    filename: str | None = None,
    on_incomplete: IncompletePolicy | str = IncompletePolicy.ABORT,
) -> ParsedTheme:
    """Validate and parse CSS theme text, attaching the filename sentiment."""
    _validate_source(source)
    policy = IncompletePolicy.coerce(on_incomplete)

    blocks = extract_blocks(source)
    theme = theme_declarations(parse_declarations(blocks.theme, custom_only=False))
    light = parse_declarations(blocks.light)
    dark = parse_declarations(blocks.dark)
    logger.debug(
        "theme blocks parsed: theme=%d light=%d dark=%d",
        len(theme), len(light), len(dark),
    )

    mappings, skipped = _assemble(theme, light, dark, policy)
    sentiment = detect_sentiment(filename)
    logger.info(
        "parsed %d theme variables (skipped=%d sentiment=%s)",
        len(mappings), len(skipped), sentiment or "none",
    )
    return ParsedTheme(mappings=tuple(mappings), sentiment=sentiment, skipped=tuple(skipped))


def load_theme_file(
    path: str | Path,
    *,
    on_incomplete: IncompletePolicy | str = IncompletePolicy.ABORT,
) -> ParsedTheme:
    """Read and parse a theme file from disk."""
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as exc:
        raise InvalidSourceError(f"Unable to stat {path}: {exc}") from exc
    if size > _MAX_THEME_FILE_BYTES:
        raise InvalidSourceError(f"{path}: file exceeds max size ({_MAX_THEME_FILE_BYTES} bytes)")
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidSourceError(f"Unable to read {path}: {exc}") from exc
    return parse_theme_css(source, filename=path.name, on_incomplete=on_incomplete)


def _assemble(
    theme: Iterable[ThemeDeclaration] | Mapping[str, str],
    light: Mapping[str, str],
    dark: Mapping[str, str],
    policy: IncompletePolicy,
) -> tuple[list[VariableMapping], list[str]]:
    if isinstance(theme, Mapping):
        theme = theme_declarations(theme)

    mappings: list[VariableMapping] = []
    skipped: list[str] = []
    for entry in theme:
        ref = entry.intermediate_ref
        light_value = light.get(ref)
        dark_value = dark.get(ref)
        missing = "light" if light_value is None else "dark" if dark_value is None else ""
        if missing:
            if policy is IncompletePolicy.SKIP:
                logger.warning("skipping %s: no %s mode value for %s", entry.target_name, missing, ref)
                skipped.append(ref)
                continue
            raise IncompleteMappingError(ref, missing)

        mappings.append(
            VariableMapping(
                target_name=entry.target_name,
                light=resolve_reference(light_value),
                dark=resolve_reference(dark_value),
                light_value=light_value,
                dark_value=dark_value,
            )
        )
    return mappings, skipped


def _validate_source(source: str) -> None:
    if not isinstance(source, str) or not source.strip():
        raise InvalidSourceError("Invalid CSS content received")
    if source.lstrip().startswith("<"):
        raise InvalidSourceError("HTML content detected instead of CSS")


def _to_path(name: str) -> str:
    if name.startswith("--"):
        name = name[2:]
    return name.replace("-", "/")


def _walk_rules(rules: list) -> Iterator:
    for rule in rules:
        yield rule
        if rule.type == "at-rule" and rule.lower_at_keyword == "layer" and rule.content is not None:
            yield from _walk_rules(
                tinycss2.parse_rule_list(rule.content, skip_comments=True, skip_whitespace=True)
            )


def _unclosed_value(tokens: list) -> str | None:
    """Return the text of a () or function block that ran past a `;` or `}`."""
    for token in tokens:
        if token.type not in ("function", "() block"):
            continue
        inner = token.arguments if token.type == "function" else token.content
        for index, item in enumerate(inner):
            if item.type == "literal" and item.value in (";", "}"):
                opener = f"{token.name}(" if token.type == "function" else "("
                return opener + tinycss2.serialize(inner[:index]).strip()
        nested = _unclosed_value(inner)
        if nested is not None:
            return nested
    return None


def _check_closed(tokens: list) -> None:
    # An unclosed ( runs to the end of the input and eats every rule after it.
    broken = _unclosed_value(tokens)
    if broken is not None:
        raise UnresolvableReferenceError(broken, reason="unclosed parenthesis")


def _split_selectors(prelude: list) -> list[list]:
    """Split a rule prelude on top-level commas into token lists."""
    selectors: list[list] = [[]]
    for token in prelude:
        if token.type == "literal" and token.value == ",":
            selectors.append([])
        elif token.type not in ("whitespace", "comment"):
            selectors[-1].append(token)
    return [selector for selector in selectors if selector]


def _has_class(selector: list, class_name: str) -> bool:
    return any(
        prev.type == "literal" and prev.value == "."
        and token.type == "ident" and token.lower_value == class_name
        for prev, token in zip(selector, selector[1:])
    )


def _is_root(selector: list) -> bool:
    return (
        len(selector) == 2
        and selector[0].type == "literal" and selector[0].value == ":"
        and selector[1].type == "ident" and selector[1].lower_value == "root"
    )


def _is_light_selector_list(selectors: list[list]) -> bool:
    if any(_has_class(sel, "dark") for sel in selectors):
        return False
    return any(_is_root(sel) or _has_class(sel, "light") for sel in selectors)
