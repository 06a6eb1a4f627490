"""Tests for the tree-sitter syntax adapter."""

import pytest

from fluxcode.exceptions import ParseFailure
from fluxcode.syntax import grammar_for


@pytest.mark.parametrize("ext,hint,grammar", [
    (".js", "", "javascript"),
    (".MJS", "", "javascript"),
    (".ts", "", "typescript"),
    (".tsx", "typescript", "tsx"),
    (".txt", "javascript", "javascript"),
    (".vue", "vue", None),
    (".md", "markdown", None),
])
def test_grammar_for(ext, hint, grammar):
    assert grammar_for(ext, hint) == grammar


def test_supported_languages(adapter):
    for language in ("javascript", "typescript", "tsx"):
        assert adapter.supports_language(language)
    assert not adapter.supports_language("python")


def test_parse_returns_root(adapter):
    root = adapter.parse("const a = 1;\n", "javascript")

    assert root.type == "program"
    assert not root.has_error


def test_parse_error_reports_location(adapter):
    with pytest.raises(ParseFailure) as exc_info:
        adapter.parse("const a = 1;\nconst = ;\n", "javascript")

    assert "(2:" in str(exc_info.value)


def test_unknown_language(adapter):
    with pytest.raises(ParseFailure) as exc_info:
        adapter.parse("x", "cobol")

    assert exc_info.value.details == {"language": "cobol"}
