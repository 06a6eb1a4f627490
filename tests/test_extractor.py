"""Tests for structural fact extraction."""

import logging

import pytest

from fluxcode.extractor import StructuralExtractor
from fluxcode.syntax import TreeSitterAdapter


def _functions(source_file):
    return {fn.name: fn for fn in source_file.functions}


class TestFunctions:
    """Function inventory and naming."""

    def test_declared_function(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "\nfunction helper(x, y) {\n  return x + y;\n}\n"))

        assert [fn.name for fn in sf.functions] == ["helper"]
        fn = sf.functions[0]
        assert fn.line == 2
        assert fn.column == 0
        assert fn.end_line == 4
        assert fn.parameters == ["x", "y"]
        assert fn.is_used is False
        assert fn.called_by == [] and fn.calls == []

    @pytest.mark.parametrize("code", [
        "function f() {}\n",
        "function* gen() {}\n",
        "const f = function () {};\n",
        "const f = async function named() {};\n",
    ])
    def test_one_fact_per_function(self, extractor, make_input, code):
        sf = extractor.extract(make_input("a.js", code))

        assert len(sf.functions) == 1
        assert sf.functions[0].name != "anonymous"
        assert sf.complexity == 1

    def test_keyword_tokens_are_not_functions(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "function helper(){ if(x){} }\n"))

        assert [(fn.name, fn.complexity) for fn in sf.functions] == [("helper", 2)]
        assert sf.complexity == 2

    def test_bound_function_expressions_take_binding_name(self, extractor, make_input):
        code = (
            "const add = (a, b) => a + b;\n"
            "const double = n => n * 2;\n"
            "let handler;\n"
            "handler = function () { return 1; };\n"
        )
        sf = extractor.extract(make_input("a.js", code))
        fns = _functions(sf)

        assert set(fns) == {"add", "double", "handler"}
        assert fns["add"].parameters == ["a", "b"]
        assert fns["double"].parameters == ["n"]
        assert fns["handler"].parameters == []

    def test_unbound_function_is_anonymous(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "[1, 2].map(function (n) { return n; });\n"))

        assert [fn.name for fn in sf.functions] == ["anonymous"]
        assert sf.complexity == 1

    def test_export_default_anonymous_function(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "export default function () { return 1; }\n"))

        assert [fn.name for fn in sf.functions] == ["default"]
        assert sf.complexity == 1
        assert [(e.name, e.kind) for e in sf.exports] == [("default", "default")]

    def test_non_identifier_parameters_are_unknown(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "function g({ x }, [y], ...rest) {}\n"))

        assert sf.functions[0].parameters == ["unknown", "unknown", "unknown"]

    def test_typescript_parameters(self, extractor, make_input):
        code = "function f(a: number, b?: string, c = 1): void {}\n"
        sf = extractor.extract(make_input("a.ts", code))

        assert sf.issues == []
        assert sf.functions[0].parameters == ["a", "b", "unknown"]

    def test_tsx_file(self, extractor, make_input):
        code = "export const Button = (props: { label: string }) => <button>{props.label}</button>;\n"
        sf = extractor.extract(make_input("Button.tsx", code))

        assert sf.issues == []
        assert [fn.name for fn in sf.functions] == ["Button"]
        assert [(e.name, e.kind) for e in sf.exports] == [("Button", "named")]


class TestComplexity:
    """Cyclomatic-style complexity counting."""

    def test_function_without_branches_is_one(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "function plain(a) { return a + 1; }\n"))

        assert sf.functions[0].complexity == 1
        assert sf.complexity == 1

    def test_every_branch_kind_adds_one(self, extractor, make_input):
        code = """
function everything(a, b, items) {
  if (a) {}
  for (let i = 0; i < 1; i++) {}
  for (const item of items) {}
  while (b) { b = false; }
  do { a = false; } while (a);
  switch (a) {
    case 1: break;
    default: break;
  }
  try { run(); } catch (err) {}
  const c = a ? 1 : 2;
  return a && b || c;
}
"""
        sf = extractor.extract(make_input("a.js", code))
        fns = _functions(sf)

        assert fns["everything"].complexity == 12
        assert sf.complexity == 12

    @pytest.mark.parametrize("body", [
        "if (a) { while (b) { b = a ? 0 : 1; } }",
        "while (b) { if (a) {} } const x = a ? 0 : 1;",
        "const x = a ? 0 : 1; if (a) {} while (b) {}",
    ])
    def test_nesting_order_does_not_matter(self, extractor, make_input, body):
        sf = extractor.extract(make_input("a.js", f"function f(a, b) {{ {body} }}\n"))

        assert sf.functions[0].complexity == 4

    def test_nested_functions_count_into_own_scope(self, extractor, make_input):
        code = """
function outer(x) {
  const inner = () => (x ? 1 : 2);
  if (x) { return inner(); }
  return 0;
}
"""
        sf = extractor.extract(make_input("a.js", code))
        fns = _functions(sf)

        assert fns["outer"].complexity == 2
        assert fns["inner"].complexity == 2
        assert sf.complexity == 4

    def test_top_level_branches_count_toward_file(self, extractor, make_input):
        code = "if (ready) { start(); }\nfunction f() { return ok || fallback; }\n"
        sf = extractor.extract(make_input("a.js", code))

        assert sf.functions[0].complexity == 2
        assert sf.complexity == 3

    def test_nullish_coalescing_is_not_counted(self, extractor, make_input):
        sf = extractor.extract(make_input("a.js", "function f(a) { return a ?? 1; }\n"))

        assert sf.functions[0].complexity == 1


class TestImportsAndExports:
    """Import and export fact lists."""

    def test_import_forms(self, extractor, make_input):
        code = (
            "import React, { useState, useEffect as effect } from 'react';\n"
            "import * as path from 'path';\n"
            "import './styles.css';\n"
        )
        sf = extractor.extract(make_input("a.js", code))

        assert [(i.source, i.imports, i.line) for i in sf.imports] == [
            ("react", ["React", "useState", "useEffect"], 1),
            ("path", ["* as path"], 2),
            ("./styles.css", [], 3),
        ]
        assert all(i.is_resolved is False for i in sf.imports)

    def test_export_forms(self, extractor, make_input):
        code = (
            "export const answer = 42, other = 1;\n"
            "export function compute() {}\n"
            "export class Widget {}\n"
            "export { compute as calc, answer };\n"
            "export default Widget;\n"
        )
        sf = extractor.extract(make_input("a.js", code))

        assert [(e.name, e.kind, e.line) for e in sf.exports] == [
            ("answer", "named", 1),
            ("other", "named", 1),
            ("compute", "named", 2),
            ("Widget", "named", 3),
            ("calc", "named", 4),
            ("answer", "named", 4),
            ("Widget", "default", 5),
        ]

    def test_typescript_type_exports(self, extractor, make_input):
        code = "export interface Props { a: string }\nexport type Id = string;\n"
        sf = extractor.extract(make_input("types.ts", code))

        assert [e.name for e in sf.exports] == ["Props", "Id"]


class TestFailureModes:
    """Parse failures and pass-through files."""

    def test_parse_error_becomes_issue(self, extractor, make_input):
        sf = extractor.extract(make_input("broken.js", "function broken( {\n  return 1;\n"))

        assert len(sf.issues) == 1
        issue = sf.issues[0]
        assert issue.kind == "parse_error"
        assert issue.severity == "error"
        assert issue.file == "broken.js"
        assert issue.id == "parse-error-broken.js"
        assert (issue.line, issue.column) == (1, 1)
        assert sf.complexity == 0
        assert sf.functions == [] and sf.imports == [] and sf.exports == []
        assert sf.content.startswith("function broken")

    def test_missing_grammar_becomes_issue(self, make_input):
        extractor = StructuralExtractor(TreeSitterAdapter(languages=["javascript"]))
        sf = extractor.extract(make_input("a.ts", "const x: number = 1;\n"))

        assert [i.kind for i in sf.issues] == ["parse_error"]
        assert sf.complexity == 0

    def test_unexpected_error_keeps_traceback(self, adapter, make_input, caplog, monkeypatch):
        def broken_visit(self, root):
            raise AttributeError("visitor bug")

        monkeypatch.setattr(logging.getLogger("fluxcode"), "propagate", True)
        monkeypatch.setattr("fluxcode.extractor._FactVisitor.visit", broken_visit)
        extractor = StructuralExtractor(adapter)

        with caplog.at_level(logging.ERROR, logger="fluxcode.extractor"):
            sf = extractor.extract(make_input("a.js", "const a = 1;\n"))

        assert [i.kind for i in sf.issues] == ["parse_error"]
        records = [r for r in caplog.records if r.name == "fluxcode.extractor"]
        assert records and records[0].exc_info is not None
        assert records[0].exc_info[0] is AttributeError

    @pytest.mark.parametrize("path", ["README.md", "package.json", "styles.css", "App.vue"])
    def test_non_code_files_pass_through(self, extractor, make_input, path):
        sf = extractor.extract(make_input(path, "function looksLikeCode() { if (x) {} }\n"))

        assert sf.id == path
        assert sf.functions == [] and sf.imports == [] and sf.exports == []
        assert sf.issues == []
        assert sf.complexity == 0

    def test_size_defaults_to_encoded_length(self, extractor, make_input):
        sf = extractor.extract(make_input("src/é.js", "const s = 'é';\n"))

        assert sf.name == "é.js"
        assert sf.size == len("const s = 'é';\n".encode("utf-8"))
