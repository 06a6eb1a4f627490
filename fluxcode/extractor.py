"""Structural extraction: one file's syntax tree -> imports, exports, functions.

A single pre-order walk over the tree collects every fact. Complexity is
cyclomatic-style: each function scope starts at 1 and every branching
construct adds 1 to the innermost enclosing function (or to the file when it
sits outside any function). The file total is the sum of its functions plus
its top-level branches.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .exceptions import ParseFailure
from .models import (
    ANONYMOUS,
    DEFAULT_EXPORT,
    ExportFact,
    FileInput,
    FunctionFact,
    ImportFact,
    Issue,
    SourceFile,
)
from .syntax import SyntaxAdapter, grammar_for

logger = logging.getLogger(__name__)

FUNCTION_NODE_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "generator_function",
    "arrow_function",
})

BRANCH_NODE_TYPES = frozenset({
    "if_statement",
    "for_statement",
    "for_in_statement",  # also covers for...of
    "while_statement",
    "do_statement",
    "switch_case",
    "switch_default",
    "catch_clause",
    "ternary_expression",
})

SHORT_CIRCUIT_OPERATORS = frozenset({"&&", "||"})

_NAMED_DECLARATIONS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
})

_DEFAULT_NAMED_TARGETS = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "class",
    "function_expression",
})


def _text(node: Any) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


def _line(node: Any) -> int:
    return node.start_point[0] + 1


def _string_value(node: Any) -> str:
    """Unquote a tree-sitter ``string`` node."""
    if node.type != "string":
        return _text(node)
    fragments = [_text(c) for c in node.children if c.type in ("string_fragment", "escape_sequence")]
    if fragments:
        return "".join(fragments)
    return _text(node)[1:-1]


def _same_node(a: Optional[Any], b: Any) -> bool:
    return (
        a is not None
        and a.start_byte == b.start_byte
        and a.end_byte == b.end_byte
        and a.type == b.type
    )


@dataclass
class _Scope:
    fact: FunctionFact
    complexity: int = 1


class _FactVisitor:
    """Walks one tree, dispatching on node type."""

    def __init__(self) -> None:
        self.functions: List[FunctionFact] = []
        self.imports: List[ImportFact] = []
        self.exports: List[ExportFact] = []
        self.top_level_complexity = 0
        self.function_complexity = 0
        self._scopes: List[_Scope] = []
        self._handlers: Dict[str, Callable[[Any, Optional[Any]], None]] = {
            "import_statement": self._on_import,
            "export_statement": self._on_export,
            "binary_expression": self._on_binary,
        }
        for node_type in FUNCTION_NODE_TYPES:
            self._handlers[node_type] = self._on_function
        for node_type in BRANCH_NODE_TYPES:
            self._handlers[node_type] = self._on_branch

    @property
    def total_complexity(self) -> int:
        return self.function_complexity + self.top_level_complexity

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def visit(self, root: Any) -> None:
        # Explicit stack: deeply nested expressions in generated code would
        # overflow the interpreter's recursion limit.
        stack: List[tuple] = [(root, None, False)]
        while stack:
            node, parent, leaving = stack.pop()
            if leaving:
                self._leave_function()
                continue
            # Keyword tokens share type names with named nodes ("function").
            if node.is_named:
                handler = self._handlers.get(node.type)
                if handler is not None:
                    handler(node, parent)
                if node.type in FUNCTION_NODE_TYPES:
                    stack.append((node, parent, True))
            for child in reversed(node.children):
                stack.append((child, node, False))

    def _leave_function(self) -> None:
        scope = self._scopes.pop()
        scope.fact.complexity = scope.complexity
        self.function_complexity += scope.complexity

    # ------------------------------------------------------------------
    # Complexity
    # ------------------------------------------------------------------

    def _bump(self) -> None:
        if self._scopes:
            self._scopes[-1].complexity += 1
        else:
            self.top_level_complexity += 1

    def _on_branch(self, node: Any, parent: Optional[Any]) -> None:
        self._bump()

    def _on_binary(self, node: Any, parent: Optional[Any]) -> None:
        operator = node.child_by_field_name("operator")
        if operator is not None and operator.type in SHORT_CIRCUIT_OPERATORS:
            self._bump()

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def _on_function(self, node: Any, parent: Optional[Any]) -> None:
        fact = FunctionFact(
            name=self._function_name(node, parent),
            line=_line(node),
            column=node.start_point[1],
            end_line=node.end_point[0] + 1,
            parameters=self._parameters(node),
        )
        self.functions.append(fact)
        self._scopes.append(_Scope(fact))

    @staticmethod
    def _function_name(node: Any, parent: Optional[Any]) -> str:
        own_name = node.child_by_field_name("name")
        if node.type in ("function_declaration", "generator_function_declaration") and own_name is not None:
            return _text(own_name)

        if parent is not None:
            if parent.type == "variable_declarator" and _same_node(parent.child_by_field_name("value"), node):
                target = parent.child_by_field_name("name")
                if target is not None and target.type == "identifier":
                    return _text(target)
            elif parent.type == "assignment_expression" and _same_node(parent.child_by_field_name("right"), node):
                target = parent.child_by_field_name("left")
                if target is not None and target.type == "identifier":
                    return _text(target)

        if own_name is not None:
            return _text(own_name)
        if parent is not None and parent.type == "export_statement":
            return DEFAULT_EXPORT
        return ANONYMOUS

    @staticmethod
    def _parameters(node: Any) -> List[str]:
        single = node.child_by_field_name("parameter")
        if single is not None:
            return [_text(single)] if single.type == "identifier" else ["unknown"]

        params = node.child_by_field_name("parameters")
        if params is None:
            return []
        names: List[str] = []
        for param in params.named_children:
            if param.type == "comment":
                continue
            if param.type == "identifier":
                names.append(_text(param))
            elif param.type in ("required_parameter", "optional_parameter"):
                pattern = param.child_by_field_name("pattern")
                if (
                    pattern is not None
                    and pattern.type == "identifier"
                    and param.child_by_field_name("value") is None
                ):
                    names.append(_text(pattern))
                else:
                    names.append("unknown")
            else:
                names.append("unknown")
        return names

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _on_import(self, node: Any, parent: Optional[Any]) -> None:
        source = node.child_by_field_name("source")
        names: List[str] = []

        for child in node.named_children:
            if child.type == "import_clause":
                names.extend(self._import_clause_names(child))
            elif child.type == "import_require_clause":
                if source is None:
                    source = child.child_by_field_name("source")
                binding = next((c for c in child.named_children if c.type == "identifier"), None)
                if binding is not None:
                    names.append(_text(binding))

        if source is None:
            return
        self.imports.append(ImportFact(source=_string_value(source), imports=names, line=_line(node)))

    @staticmethod
    def _import_clause_names(clause: Any) -> List[str]:
        names: List[str] = []
        for child in clause.named_children:
            if child.type == "identifier":
                names.append(_text(child))
            elif child.type == "namespace_import":
                local = next((c for c in child.named_children if c.type == "identifier"), None)
                if local is not None:
                    names.append(f"* as {_text(local)}")
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    imported = spec.child_by_field_name("name")
                    if imported is not None:
                        names.append(_string_value(imported))
        return [n for n in names if n]

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def _on_export(self, node: Any, parent: Optional[Any]) -> None:
        line = _line(node)
        declaration = node.child_by_field_name("declaration")

        if any(child.type == "default" for child in node.children):
            target = declaration if declaration is not None else node.child_by_field_name("value")
            name = DEFAULT_EXPORT
            if target is not None:
                if target.type == "identifier":
                    name = _text(target)
                elif target.type in _DEFAULT_NAMED_TARGETS:
                    own = target.child_by_field_name("name")
                    if own is not None:
                        name = _text(own)
            self.exports.append(ExportFact(name=name, kind="default", line=line))
            return

        if declaration is not None:
            if declaration.type in _NAMED_DECLARATIONS:
                own = declaration.child_by_field_name("name")
                if own is not None:
                    self.exports.append(ExportFact(name=_text(own), kind="named", line=line))
            elif declaration.type in ("lexical_declaration", "variable_declaration"):
                for declarator in declaration.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    target = declarator.child_by_field_name("name")
                    if target is not None and target.type == "identifier":
                        self.exports.append(ExportFact(name=_text(target), kind="named", line=line))
            return

        for child in node.named_children:
            if child.type != "export_clause":
                continue
            for spec in child.named_children:
                if spec.type != "export_specifier":
                    continue
                exported = spec.child_by_field_name("alias")
                if exported is None:
                    exported = spec.child_by_field_name("name")
                if exported is not None:
                    self.exports.append(ExportFact(name=_string_value(exported), kind="named", line=line))


# ===================================================================
# Public extractor
# ===================================================================

class StructuralExtractor:
    """Produces a :class:`SourceFile` fact bundle for one supplied file."""

    def __init__(self, adapter: SyntaxAdapter) -> None:
        self.adapter = adapter

    def extract(self, item: FileInput) -> SourceFile:
        """Extract structural facts from *item*; never raises.

        Files outside the supported language family are passed through with
        empty facts. A parse failure yields one ``parse_error`` issue on the
        file, empty facts and complexity 0.
        """
        source_file = SourceFile(
            id=item.path,
            name=posixpath.basename(item.path),
            extension=item.extension,
            size=item.size if item.size is not None else len(item.text.encode("utf-8")),
            content=item.text,
            language=item.language,
        )

        grammar = grammar_for(item.extension, item.language)
        if grammar is None:
            return source_file

        try:
            root = self.adapter.parse(item.text, grammar)
            visitor = _FactVisitor()
            visitor.visit(root)
        except ParseFailure as exc:
            logger.warning("Parse error in %s: %s", item.path, exc)
            source_file.issues.append(parse_error_issue(item.path, str(exc)))
            return source_file
        except Exception as exc:
            logger.exception("Extraction failed for %s", item.path)
            source_file.issues.append(parse_error_issue(item.path, str(exc) or type(exc).__name__))
            return source_file

        source_file.functions = visitor.functions
        source_file.imports = visitor.imports
        source_file.exports = visitor.exports
        source_file.complexity = visitor.total_complexity
        return source_file


def parse_error_issue(file_id: str, message: str) -> Issue:
    return Issue(
        id=f"parse-error-{file_id}",
        kind="parse_error",
        severity="error",
        message=f"Parse error: {message}",
        file=file_id,
        line=1,
        column=1,
        suggestion="Check the syntax of this file",
    )
