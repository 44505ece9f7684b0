"""Tests for themevars.core.sentiment."""

import pytest

from themevars.core.models import VariableMapping
from themevars.core.sentiment import (
    SENTIMENTS,
    detect_sentiment,
    find_orphaned_sentiment_variables,
)


@pytest.mark.parametrize("filename", [f"{s}.css" for s in SENTIMENTS])
def test_detect_known_sentiments(filename):
    assert detect_sentiment(filename) == filename[:-4]


@pytest.mark.parametrize("filename", [
    None,
    "",
    "theme.css",
    "Danger.css",
    "danger.scss",
    "my-danger.css",
    "danger.css.bak",
])
def test_detect_no_sentiment(filename):
    assert detect_sentiment(filename) is None


def _mapping(name):
    return VariableMapping(name, "color/red/500", "color/red/700")


class TestOrphanedVariables:
    def test_finds_sentiment_variables_not_in_theme(self):
        existing = {
            "color/fill/danger": "v1",
            "color/text/danger": "v2",
            "color/fill/danger/hover": "v3",
            "color/fill/warning": "v4",
            "color/fill/dangerous": "v5",
        }
        orphans = find_orphaned_sentiment_variables(
            existing, [_mapping("color/fill/danger")], "danger"
        )
        assert orphans == [("color/text/danger", "v2"), ("color/fill/danger/hover", "v3")]

    def test_nothing_orphaned(self):
        existing = {"color/fill/danger": "v1"}
        assert find_orphaned_sentiment_variables(
            existing, [_mapping("color/fill/danger")], "danger"
        ) == []

    def test_unknown_sentiment_rejected(self):
        with pytest.raises(ValueError):
            find_orphaned_sentiment_variables({}, [], "spooky")
