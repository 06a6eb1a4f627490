"""Project-level quality metrics."""

from __future__ import annotations

from typing import Dict, List

from .models import Issue, QualityMetrics, SourceFile

LOW_BAND_LIMIT = 5
MEDIUM_BAND_LIMIT = 15


def complexity_band(complexity: int) -> str:
    if complexity < LOW_BAND_LIMIT:
        return "low"
    if complexity < MEDIUM_BAND_LIMIT:
        return "medium"
    return "high"


def compute_metrics(files: List[SourceFile], issues: List[Issue]) -> QualityMetrics:
    """Reduce per-file complexity, usage flags and issue counts.

    maintainability = 100 - 10*errors - 5*warnings - sum(complexity)/10,
    clamped to [0, 100]; technical debt is 0.5h per error and 0.2h per
    warning. Info-level issues affect neither.
    """
    complexities = [f.complexity for f in files]
    total_complexity = sum(complexities)

    distribution: Dict[str, int] = {"low": 0, "medium": 0, "high": 0}
    for value in complexities:
        distribution[complexity_band(value)] += 1

    functions = [fn for f in files for fn in f.functions]
    used = sum(1 for fn in functions if fn.is_used)
    coverage = (used / len(functions)) * 100 if functions else 0.0

    errors = sum(1 for i in issues if i.severity == "error")
    warnings = sum(1 for i in issues if i.severity == "warning")

    maintainability = 100 - errors * 10 - warnings * 5 - total_complexity / 10
    maintainability = min(100.0, max(0.0, maintainability))

    return QualityMetrics(
        complexity_average=total_complexity / len(complexities) if complexities else 0.0,
        complexity_max=max(complexities, default=0),
        complexity_distribution=distribution,
        function_coverage=coverage,
        maintainability=maintainability,
        debt_hours=errors * 0.5 + warnings * 0.2,
        debt_issues=errors + warnings,
    )
