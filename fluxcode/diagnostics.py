"""Rule-based diagnostics and improvement suggestions.

Rules run over already-extracted facts only; nothing is re-parsed here.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .config_manager import AnalysisSettings
from .models import DEFAULT_EXPORT, FunctionFact, ImportFact, Issue, SourceFile, Suggestion

logger = logging.getLogger(__name__)


class DiagnosticsEngine:
    """Derive issues and suggestions from files, functions and usage flags."""

    def __init__(self, settings: Optional[AnalysisSettings] = None) -> None:
        self.settings = settings or AnalysisSettings()

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def detect(self, files: List[SourceFile]) -> List[Issue]:
        """Run every rule and attach the issues to their files.

        Returns:
            The newly detected issues, file by file in input order.
        """
        issues: List[Issue] = []
        for source_file in files:
            found: List[Issue] = []
            for fn in source_file.functions:
                if self.is_unused(fn):
                    found.append(self._unused_function(source_file, fn))
            for fact in source_file.imports:
                if not fact.is_resolved:
                    found.append(self._unresolved_import(source_file, fact))
            if source_file.complexity > self.settings.high_complexity:
                found.append(self._high_complexity(source_file))

            source_file.issues.extend(found)
            issues.extend(found)

        logger.debug("Detected %d issues across %d files", len(issues), len(files))
        return issues

    def is_unused(self, fn: FunctionFact) -> bool:
        if fn.is_used or fn.name == DEFAULT_EXPORT:
            return False
        return not any(fn.name.startswith(p) for p in self.settings.exempt_prefixes if p)

    @staticmethod
    def _unused_function(source_file: SourceFile, fn: FunctionFact) -> Issue:
        return Issue(
            id=f"unused-function-{source_file.id}-{fn.name}-{fn.line}",
            kind="unused_function",
            severity="warning",
            message=f"Function '{fn.name}' is never used",
            file=source_file.id,
            line=fn.line,
            column=fn.column,
            suggestion="Remove this function or call it somewhere",
        )

    @staticmethod
    def _unresolved_import(source_file: SourceFile, fact: ImportFact) -> Issue:
        return Issue(
            id=f"unresolved-import-{source_file.id}-{fact.source}-{fact.line}",
            kind="unresolved_import",
            severity="error",
            message=f"Unresolved import: '{fact.source}'",
            file=source_file.id,
            line=fact.line,
            column=1,
            suggestion="Check the import path or install the missing package",
        )

    @staticmethod
    def _high_complexity(source_file: SourceFile) -> Issue:
        return Issue(
            id=f"high-complexity-{source_file.id}",
            kind="high_complexity",
            severity="warning",
            message=f"High complexity ({source_file.complexity})",
            file=source_file.id,
            line=1,
            column=1,
            suggestion="Consider splitting this file into smaller functions",
        )

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def suggest(self, files: List[SourceFile]) -> List[Suggestion]:
        """Refactor suggestions for complex files, fix-ups for files with issues."""
        suggestions: List[Suggestion] = []

        for source_file in files:
            if source_file.complexity > self.settings.refactor_complexity:
                high = source_file.complexity > self.settings.high_priority_complexity
                suggestions.append(Suggestion(
                    id=f"refactor-{source_file.id}",
                    kind="refactor",
                    title="Reduce complexity",
                    description=(
                        f"{source_file.name} has a complexity of {source_file.complexity}. "
                        "Consider splitting it into smaller functions."
                    ),
                    file=source_file.id,
                    priority="high" if high else "medium",
                    effort="medium",
                ))

        for source_file in files:
            if source_file.issues:
                count = len(source_file.issues)
                suggestions.append(Suggestion(
                    id=f"fix-errors-{source_file.id}",
                    kind="best_practice",
                    title="Fix reported issues",
                    description=f"{source_file.name} has {count} issue(s).",
                    file=source_file.id,
                    priority="high",
                    effort="easy",
                ))

        return suggestions
