"""Two-pass analysis engine.

Pass 1 extracts every file independently (in parallel). Pass 2 needs the
complete file set: it resolves imports, builds relationships, derives
diagnostics and aggregates metrics. Pass 2 never starts before every pass-1
future has completed.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .config_manager import AnalysisSettings
from .diagnostics import DiagnosticsEngine
from .exceptions import AnalysisInputError, EmptyProjectError
from .extractor import StructuralExtractor
from .metrics import compute_metrics
from .models import AnalysisResult, FileInput, Issue, SourceFile
from .relationships import RelationshipBuilder
from .resolver import ImportResolver
from .syntax import SyntaxAdapter, TreeSitterAdapter

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """Turns supplied files into one :class:`AnalysisResult`."""

    def __init__(
        self,
        settings: Optional[AnalysisSettings] = None,
        adapter: Optional[SyntaxAdapter] = None,
    ) -> None:
        self.settings = settings or AnalysisSettings()
        self.adapter = adapter or TreeSitterAdapter()
        self.extractor = StructuralExtractor(self.adapter)
        self.diagnostics = DiagnosticsEngine(self.settings)

    def analyze(self, inputs: Sequence[FileInput], project_name: str = "") -> AnalysisResult:
        """Analyze one project.

        Args:
            inputs: Files from the supplier, already read into memory.
            project_name: Label carried into the result.

        Returns:
            The complete analysis; every input path appears exactly once.

        Raises:
            EmptyProjectError: If *inputs* is empty.
            AnalysisInputError: If two inputs share a path.
        """
        self._validate(inputs)

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            # executor.map yields in input order and waits for every result,
            # which is the barrier between the passes.
            files: List[SourceFile] = list(executor.map(self.extractor.extract, inputs))
            logger.debug("Extracted %d files", len(files))

            resolver = ImportResolver(f.id for f in files)
            for source_file in files:
                resolver.resolve_imports(source_file.imports, source_file.id)

            relationships = RelationshipBuilder(resolver).build(files, mapper=executor.map)

        parse_issues: List[Issue] = [i for f in files for i in f.issues]
        issues = parse_issues + self.diagnostics.detect(files)
        suggestions = self.diagnostics.suggest(files)
        metrics = compute_metrics(files, issues)

        logger.info(
            "Analyzed %d files: %d relationships, %d issues",
            len(files), len(relationships), len(issues),
        )
        return AnalysisResult(
            files=files,
            relationships=relationships,
            issues=issues,
            suggestions=suggestions,
            metrics=metrics,
            project_name=project_name,
            analyzed_at=datetime.now(timezone.utc).isoformat(),
        )

    @staticmethod
    def _validate(inputs: Sequence[FileInput]) -> None:
        if not inputs:
            raise EmptyProjectError("No files supplied for analysis")
        seen = set()
        for item in inputs:
            if item.path in seen:
                raise AnalysisInputError("Duplicate file path in input", {"path": item.path})
            seen.add(item.path)


def analyze_files(
    inputs: Sequence[FileInput],
    project_name: str = "",
    settings: Optional[AnalysisSettings] = None,
) -> AnalysisResult:
    """Convenience wrapper around :class:`AnalysisEngine`."""
    return AnalysisEngine(settings=settings).analyze(inputs, project_name=project_name)
