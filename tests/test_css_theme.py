"""Tests for themevars.core.css_theme."""

from __future__ import annotations

from pathlib import Path

import pytest

from themevars.core.css_theme import (
    assemble,
    extract_blocks,
    load_theme_file,
    mode_declarations,
    parse_declarations,
    parse_theme,
    parse_theme_css,
    resolve_reference,
    theme_declarations,
)
from themevars.core.models import (
    EmptyThemeError,
    IncompleteMappingError,
    IncompletePolicy,
    InvalidOpacityError,
    InvalidSourceError,
    MissingBlockError,
    ThemeDeclaration,
    ThemeParseError,
    UnresolvableReferenceError,
    VariableMapping,
)

DANGER_CSS = """
@theme inline { --color-fill-danger: var(--fill-danger); }
:root, .light { --fill-danger: var(--color-red-500); }
.dark { --fill-danger: --alpha(var(--color-red-700) / 90%); }
"""

MULTI_CSS = """
/* palette bindings */
@theme inline {
  --color-fill-danger: var(--fill-danger);
  --color-text-danger: var(--text-danger);
  --font-sans: Inter, sans-serif;
}

:root,
.light {
  --fill-danger: var(--color-red-500);
  --text-danger: --alpha(var(--color-red-900) / 5%);
  color-scheme: light;
}

.dark {
  --fill-danger: var(--color-red-400);
  --text-danger: --alpha( var( --color-white ) / 50% );
}
"""


def _write_css(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestExtractBlocks:
    def test_extracts_all_three_bodies(self):
        blocks = extract_blocks(DANGER_CSS)
        assert "--color-fill-danger" in blocks.theme
        assert "var(--color-red-500)" in blocks.light
        assert "--alpha" in blocks.dark

    def test_missing_light_block(self):
        source = "@theme { --a: var(--b); } .dark { --b: var(--c); }"
        with pytest.raises(MissingBlockError) as exc_info:
            extract_blocks(source)
        assert exc_info.value.block == "light"
        assert ":root or .light" in str(exc_info.value)

    def test_missing_theme_block(self):
        with pytest.raises(MissingBlockError) as exc_info:
            extract_blocks(":root { --b: var(--c); } .dark { --b: var(--c); }")
        assert exc_info.value.block == "theme"

    def test_missing_dark_block(self):
        with pytest.raises(MissingBlockError) as exc_info:
            extract_blocks("@theme { --a: var(--b); } :root { --b: var(--c); }")
        assert exc_info.value.block == "dark"

    def test_root_alone_is_light(self):
        blocks = extract_blocks("@theme { --a: var(--b); } :root { --b: 1; } .dark { --b: 2; }")
        assert blocks.light.strip() == "--b: 1;"

    def test_light_class_alone_is_light(self):
        blocks = extract_blocks("@theme { --a: var(--b); } .light { --b: 1; } .dark { --b: 2; }")
        assert blocks.light.strip() == "--b: 1;"

    def test_first_theme_block_wins(self):
        source = (
            "@theme { --first: var(--x); }\n"
            "@theme { --second: var(--y); }\n"
            ":root { --x: 1; } .dark { --x: 2; }"
        )
        blocks = extract_blocks(source)
        assert "--first" in blocks.theme
        assert "--second" not in blocks.theme

    def test_dark_selector_not_taken_as_light(self):
        source = "@theme { --a: var(--b); } :root.dark { --b: 2; } :root { --b: 1; }"
        blocks = extract_blocks(source)
        assert blocks.dark.strip() == "--b: 2;"
        assert blocks.light.strip() == "--b: 1;"

    def test_darker_class_is_not_dark(self):
        source = "@theme { --a: var(--b); } :root { --b: 1; } .darker { --b: 3; }"
        with pytest.raises(MissingBlockError):
            extract_blocks(source)

    def test_nested_braces_bound_block(self):
        source = (
            "@theme { --a: var(--b); }\n"
            ":root { --b: var(--c); @media (min-width: 10px) { .x { color: red; } } --d: var(--e); }\n"
            ".dark { --b: var(--f); }"
        )
        blocks = extract_blocks(source)
        assert "--d: var(--e)" in blocks.light
        assert "--f" not in blocks.light

    def test_blocks_inside_layer(self):
        source = (
            "@layer base {\n"
            "  @theme inline { --a: var(--b); }\n"
            "  :root { --b: var(--c); }\n"
            "  .dark { --b: var(--d); }\n"
            "}"
        )
        blocks = extract_blocks(source)
        assert "--a" in blocks.theme
        assert "--c" in blocks.light
        assert "--d" in blocks.dark

    def test_commented_out_block_is_ignored(self):
        source = "/* .dark { --b: var(--z); } */ @theme { --a: var(--b); } :root { --b: 1; }"
        with pytest.raises(MissingBlockError):
            extract_blocks(source)

    def test_unclosed_last_block_ends_at_end_of_input(self):
        blocks = extract_blocks("@theme { --a: var(--b); } :root { --b: 1; } .dark { --b: 2;")
        assert blocks.dark.strip() == "--b: 2;"

    def test_brace_inside_string(self):
        source = (
            "@theme { --a: var(--b); }\n"
            ':root, .light { --b: var(--c); --icon-open: "{"; }\n'
            ".dark { --b: var(--d); }"
        )
        blocks = extract_blocks(source)
        assert "--icon-open" in blocks.light
        assert "--d" in blocks.dark

    def test_unclosed_parenthesis_reported_on_value(self):
        source = (
            "@theme { --a: var(--b); }\n"
            ":root { --unused: var(--color-red-500; --b: var(--color-red-500); }\n"
            ".dark { --b: var(--d); }"
        )
        with pytest.raises(UnresolvableReferenceError, match="unclosed parenthesis") as exc_info:
            extract_blocks(source)
        assert exc_info.value.value == "var(--color-red-500"


class TestParseDeclarations:
    def test_splits_and_trims(self):
        decls = parse_declarations("  --a : var(--x) ;\n--b:var(--y);;  ")
        assert decls == {"--a": "var(--x)", "--b": "var(--y)"}

    def test_skips_non_custom_properties(self):
        decls = parse_declarations("color-scheme: dark; --a: 1;")
        assert decls == {"--a": "1"}

    def test_keeps_non_custom_properties_when_asked(self):
        decls = parse_declarations("color-scheme: dark; --a: 1;", custom_only=False)
        assert decls == {"color-scheme": "dark", "--a": "1"}

    def test_splits_at_first_colon(self):
        decls = parse_declarations("--url: url(http://example.com/a.png);")
        assert decls["--url"] == "url(http://example.com/a.png)"

    def test_semicolon_inside_parentheses(self):
        decls = parse_declarations('--icon: url("data:image/svg+xml;utf8,<svg/>"); --b: 2;')
        assert decls["--b"] == "2"
        assert decls["--icon"].startswith("url(")

    def test_segments_without_colon_are_skipped(self):
        assert parse_declarations("garbage; --a: 1") == {"--a": "1"}

    def test_nested_rules_are_dropped(self):
        decls = parse_declarations("--a: 1; .child { --b: 2; }")
        assert decls == {"--a": "1"}

    def test_string_values_keep_braces(self):
        decls = parse_declarations('--icon-open: "{"; --icon-close: "}"; --b: 2;')
        assert decls == {"--icon-open": '"{"', "--icon-close": '"}"', "--b": "2"}

    def test_comments_inside_values_dropped(self):
        decls = parse_declarations("--a: var(--x) /* brand */; /* --b: 1; */")
        assert decls == {"--a": "var(--x)"}

    def test_unclosed_parenthesis_raises(self):
        with pytest.raises(UnresolvableReferenceError):
            parse_declarations("--unused: var(--a; --b: var(--c);")

    def test_mode_declarations(self):
        decls = mode_declarations({"--a": "var(--x)", "color": "red"})
        assert [d.property_name for d in decls] == ["--a"]
        assert decls[0].raw_value == "var(--x)"


class TestThemeDeclarations:
    def test_builds_target_paths(self):
        entries = theme_declarations({"--color-fill-danger": "var(--fill-danger)"})
        assert entries == [ThemeDeclaration("color/fill/danger", "--fill-danger")]

    def test_non_reference_values_ignored(self):
        entries = theme_declarations({
            "--font-sans": "Inter, sans-serif",
            "--color-a": "var(--a)",
        })
        assert [e.target_name for e in entries] == ["color/a"]

    def test_no_references_raises(self):
        with pytest.raises(EmptyThemeError):
            theme_declarations({"--radius": "4px"})


class TestResolveReference:
    @pytest.mark.parametrize("ident", [
        "color-red-500",
        "a",
        "brand-2-x",
        "color-neutral-950",
    ])
    def test_plain_form_replaces_hyphens(self, ident):
        assert resolve_reference(f"var(--{ident})") == ident.replace("-", "/")

    @pytest.mark.parametrize("opacity,expected", [
        ("5", "color/red/500_05"),
        ("50", "color/red/500_50"),
        ("90", "color/red/500_90"),
        ("0", "color/red/500_00"),
        ("100", "color/red/500"),
    ])
    def test_alpha_form_suffix(self, opacity, expected):
        assert resolve_reference(f"--alpha(var(--color-red-500) / {opacity}%)") == expected

    def test_stepless_color_keeps_suffix_format(self):
        assert resolve_reference("--alpha(var(--color-black) / 50%)") == "color/black_50"

    def test_whitespace_is_insignificant(self):
        assert resolve_reference("  --alpha(  var( --color-white )  /  8 % ) ") == "color/white_08"

    @pytest.mark.parametrize("value", [
        "red",
        "#ff0000",
        "calc(var(--a) * 2)",
        "var(--a, red)",
        "var(--a) var(--b)",
        "",
    ])
    def test_rejects_other_forms(self, value):
        with pytest.raises(UnresolvableReferenceError):
            resolve_reference(value)

    @pytest.mark.parametrize("opacity", ["101", "5.5", "abc", "-5", "1000"])
    def test_rejects_bad_opacity(self, opacity):
        with pytest.raises(InvalidOpacityError) as exc_info:
            resolve_reference(f"--alpha(var(--color-red-500) / {opacity}%)")
        assert exc_info.value.opacity == opacity
        assert isinstance(exc_info.value, UnresolvableReferenceError)


class TestAssemble:
    def test_joins_by_intermediate_name(self):
        mappings = assemble(
            [ThemeDeclaration("color/fill/danger", "--fill-danger")],
            {"--fill-danger": "var(--color-red-500)"},
            {"--fill-danger": "var(--color-red-700)"},
        )
        assert mappings == [VariableMapping("color/fill/danger", "color/red/500", "color/red/700")]
        assert mappings[0].light_value == "var(--color-red-500)"

    def test_accepts_raw_theme_declarations(self):
        mappings = assemble(
            {"--color-x": "var(--x)"},
            {"--x": "var(--color-a)"},
            {"--x": "var(--color-b)"},
        )
        assert mappings[0].target_name == "color/x"

    def test_missing_dark_raises(self):
        with pytest.raises(IncompleteMappingError) as exc_info:
            assemble(
                [ThemeDeclaration("color/x", "--x")],
                {"--x": "var(--a)"},
                {},
            )
        assert exc_info.value.intermediate_name == "--x"
        assert exc_info.value.missing_mode == "dark"
        assert str(exc_info.value) == "Missing Dark mode value for --x"

    def test_missing_light_reported_first(self):
        with pytest.raises(IncompleteMappingError) as exc_info:
            assemble([ThemeDeclaration("color/x", "--x")], {}, {})
        assert exc_info.value.missing_mode == "light"

    def test_skip_policy_drops_entry(self):
        mappings = assemble(
            [ThemeDeclaration("color/x", "--x"), ThemeDeclaration("color/y", "--y")],
            {"--x": "var(--a)", "--y": "var(--b)"},
            {"--y": "var(--c)"},
            on_incomplete="skip",
        )
        assert [m.target_name for m in mappings] == ["color/y"]

    def test_order_follows_theme(self):
        theme = [ThemeDeclaration(f"color/{n}", f"--{n}") for n in ("c", "a", "b")]
        values = {f"--{n}": f"var(--p-{n})" for n in ("a", "b", "c")}
        mappings = assemble(theme, values, values)
        assert [m.target_name for m in mappings] == ["color/c", "color/a", "color/b"]


class TestParseTheme:
    def test_end_to_end_scenario(self):
        assert parse_theme(DANGER_CSS) == [
            VariableMapping("color/fill/danger", "color/red/500", "color/red/700_90"),
        ]

    def test_string_with_brace_in_light_block(self):
        source = DANGER_CSS.replace(
            "--fill-danger: var(--color-red-500);",
            '--fill-danger: var(--color-red-500); --icon-open: "{";',
        )
        assert parse_theme(source) == [
            VariableMapping("color/fill/danger", "color/red/500", "color/red/700_90"),
        ]

    def test_unclosed_parenthesis_is_not_a_missing_value(self):
        source = DANGER_CSS.replace(
            ":root, .light { ",
            ":root, .light { --unused: var(--color-red-500; ",
        )
        with pytest.raises(UnresolvableReferenceError):
            parse_theme(source)

    def test_idempotent(self):
        assert parse_theme(MULTI_CSS) == parse_theme(MULTI_CSS)

    def test_multi_entry_theme(self):
        mappings = parse_theme(MULTI_CSS)
        assert mappings == [
            VariableMapping("color/fill/danger", "color/red/500", "color/red/400"),
            VariableMapping("color/text/danger", "color/red/900_05", "color/white_50"),
        ]

    def test_every_mapping_has_both_sides(self):
        for mapping in parse_theme(MULTI_CSS):
            assert mapping.light
            assert mapping.dark

    def test_unresolvable_value_aborts(self):
        source = DANGER_CSS.replace("var(--color-red-500)", "#ff0000")
        with pytest.raises(UnresolvableReferenceError):
            parse_theme(source)

    def test_strict_policy_aborts(self):
        source = DANGER_CSS.replace(".dark { --fill-danger", ".dark { --other")
        with pytest.raises(IncompleteMappingError):
            parse_theme(source)

    @pytest.mark.parametrize("source", ["", "   \n", "<html><body></body></html>"])
    def test_invalid_source(self, source):
        with pytest.raises(InvalidSourceError):
            parse_theme(source)

    def test_errors_share_base_class(self):
        with pytest.raises(ThemeParseError):
            parse_theme("@theme { --a: var(--b); }")


class TestParseThemeCss:
    def test_sentiment_from_filename(self):
        parsed = parse_theme_css(DANGER_CSS, filename="danger.css")
        assert parsed.sentiment == "danger"
        assert [m.target_name for m in parsed.mappings] == ["color/fill/danger"]

    def test_no_sentiment_for_other_files(self):
        assert parse_theme_css(DANGER_CSS, filename="theme.css").sentiment is None

    def test_skipped_entries_reported(self):
        source = DANGER_CSS.replace(
            "@theme inline { ",
            "@theme inline { --color-ghost: var(--ghost); ",
        )
        parsed = parse_theme_css(source, on_incomplete=IncompletePolicy.SKIP)
        assert parsed.skipped == ("--ghost",)
        assert [m.target_name for m in parsed.mappings] == ["color/fill/danger"]


class TestLoadThemeFile:
    def test_loads_and_detects_sentiment(self, tmp_path):
        path = _write_css(tmp_path / "danger.css", DANGER_CSS)
        parsed = load_theme_file(path)
        assert parsed.sentiment == "danger"
        assert len(parsed.mappings) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidSourceError):
            load_theme_file(tmp_path / "nope.css")

    def test_oversized_file(self, tmp_path):
        path = _write_css(tmp_path / "big.css", DANGER_CSS + " " * (600 * 1024))
        with pytest.raises(InvalidSourceError, match="max size"):
            load_theme_file(path)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "bad.css"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(InvalidSourceError):
            load_theme_file(path)
