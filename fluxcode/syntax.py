"""Syntax adapter: turns source text into a tree-sitter syntax tree.

The engine only needs a tree whose nodes expose ``type``, ``children``,
``child_by_field_name``, ``start_point``/``end_point`` and ``text``, so any
adapter producing such nodes can be substituted for :class:`TreeSitterAdapter`.

Tree-sitter is error tolerant: it always returns a tree, marking broken
regions with ``ERROR`` or missing nodes. Such trees are reported as
:class:`~fluxcode.exceptions.ParseFailure` so that a file is either fully
analyzed or flagged, never half-analyzed.
"""

from __future__ import annotations

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ParseFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language <-> file-extension mapping
# ---------------------------------------------------------------------------
GRAMMAR_BY_EXTENSION: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}


def grammar_for(extension: str, language_hint: str = "") -> Optional[str]:
    """Pick the grammar for a file, preferring the extension over the hint."""
    grammar = GRAMMAR_BY_EXTENSION.get(extension.lower())
    if grammar:
        return grammar
    if language_hint in ("javascript", "typescript", "tsx"):
        return language_hint
    return None


# ===================================================================
# Abstract adapter interface
# ===================================================================

class SyntaxAdapter(ABC):
    """Pluggable source of syntax trees."""

    @abstractmethod
    def parse(self, text: str, language_hint: str) -> Any:
        """Return the root node of *text*, or raise ``ParseFailure``."""
        ...

    @abstractmethod
    def supports_language(self, language: str) -> bool:
        """Return True if this adapter can parse *language*."""
        ...


# ===================================================================
# Tree-sitter adapter
# ===================================================================

class TreeSitterAdapter(SyntaxAdapter):
    """JavaScript / TypeScript / TSX adapter built on tree-sitter grammars."""

    # grammar name -> (module, attribute returning the Language capsule)
    _GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
        "javascript": ("tree_sitter_javascript", "language"),
        "typescript": ("tree_sitter_typescript", "language_typescript"),
        "tsx": ("tree_sitter_typescript", "language_tsx"),
    }

    def __init__(self, languages: Optional[List[str]] = None) -> None:
        self._languages: Dict[str, Any] = {}
        self._requested = languages or list(self._GRAMMAR_MODULES)
        self._init_languages()

    def _init_languages(self) -> None:
        from tree_sitter import Language  # type: ignore[import-untyped]

        for lang in self._requested:
            spec = self._GRAMMAR_MODULES.get(lang)
            if spec is None:
                logger.warning("No grammar module mapped for language '%s'", lang)
                continue
            mod_name, attr = spec
            try:
                mod = importlib.import_module(mod_name)
                self._languages[lang] = Language(getattr(mod, attr)())
                logger.debug("Loaded tree-sitter grammar for %s", lang)
            except ImportError:
                logger.warning(
                    "Grammar package '%s' not installed for language '%s'. "
                    "Install with: pip install %s",
                    mod_name, lang, mod_name.replace("_", "-"),
                )

    def supports_language(self, language: str) -> bool:
        return language in self._languages

    def parse(self, text: str, language_hint: str) -> Any:
        from tree_sitter import Parser as TSParser  # type: ignore[import-untyped]

        language = self._languages.get(language_hint)
        if language is None:
            raise ParseFailure(
                f"No grammar available for language '{language_hint}'",
                {"language": language_hint},
            )

        # A parser per call: tree-sitter parsers must not be shared across
        # the extraction worker threads.
        tree = TSParser(language).parse(text.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            raise ParseFailure(_describe_error(root))
        return root


def _describe_error(root: Any) -> str:
    """Build a message for the first ERROR or missing node in document order."""
    node = _first_error_node(root)
    if node is None:
        return "Syntax error"
    line, column = node.start_point[0] + 1, node.start_point[1] + 1
    if node.is_missing:
        return f"Missing '{node.type}' ({line}:{column})"
    snippet = (node.text or b"").decode("utf-8", errors="replace").strip().splitlines()
    token = snippet[0][:40] if snippet else ""
    if token:
        return f"Unexpected token '{token}' ({line}:{column})"
    return f"Unexpected token ({line}:{column})"


def _first_error_node(node: Any) -> Optional[Any]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error_node(child)
            if found is not None:
                return found
    return None
