"""Core data models exchanged between the analysis stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

Severity = Literal["error", "warning", "info"]
RelationshipKind = Literal["import", "function_call"]
ExportKind = Literal["default", "named"]

ANONYMOUS = "anonymous"
DEFAULT_EXPORT = "default"
SYNTHETIC_NAMES = frozenset({ANONYMOUS, DEFAULT_EXPORT})


@dataclass(frozen=True)
class FileInput:
    """One file as handed over by the file supplier."""
    path: str
    text: str
    extension: str
    language: str
    size: Optional[int] = None


@dataclass
class FunctionFact:
    name: str
    line: int
    column: int
    parameters: List[str] = field(default_factory=list)
    complexity: int = 1
    end_line: int = 0
    is_used: bool = False
    called_by: List[str] = field(default_factory=list)
    calls: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "line": self.line,
            "column": self.column,
            "endLine": self.end_line,
            "parameters": list(self.parameters),
            "complexity": self.complexity,
            "isUsed": self.is_used,
            "calledBy": list(self.called_by),
            "calls": list(self.calls),
        }


@dataclass
class ImportFact:
    source: str
    imports: List[str] = field(default_factory=list)
    line: int = 0
    is_resolved: bool = False

    @property
    def is_relative(self) -> bool:
        return self.source.startswith("./") or self.source.startswith("../")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "imports": list(self.imports),
            "line": self.line,
            "isResolved": self.is_resolved,
        }


@dataclass
class ExportFact:
    name: str
    kind: ExportKind
    line: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.kind, "line": self.line}


@dataclass
class Issue:
    id: str
    kind: str
    severity: Severity
    message: str
    file: str
    line: int = 1
    column: int = 1
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "type": self.kind,
            "severity": self.severity,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "column": self.column,
        }
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion
        return payload


@dataclass
class SourceFile:
    """Structural facts of one analyzed file; ``id`` is the relative path."""
    id: str
    name: str
    extension: str
    size: int
    content: str
    language: str
    complexity: int = 0
    functions: List[FunctionFact] = field(default_factory=list)
    imports: List[ImportFact] = field(default_factory=list)
    exports: List[ExportFact] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.id

    def to_dict(self, include_content: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "type": "file",
            "extension": self.extension,
            "size": self.size,
            "language": self.language,
            "complexity": self.complexity,
            "errors": [i.to_dict() for i in self.issues],
            "functions": [f.to_dict() for f in self.functions],
            "imports": [i.to_dict() for i in self.imports],
            "exports": [e.to_dict() for e in self.exports],
        }
        if include_content:
            payload["content"] = self.content
        return payload


@dataclass(frozen=True)
class Relationship:
    id: str
    source: str
    target: str
    kind: RelationshipKind
    strength: float
    bidirectional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.kind,
            "strength": self.strength,
            "bidirectional": self.bidirectional,
        }


@dataclass
class Suggestion:
    id: str
    kind: Literal["refactor", "optimization", "best_practice", "security"]
    title: str
    description: str
    file: str
    priority: Literal["high", "medium", "low"]
    effort: Literal["easy", "medium", "hard"]
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "type": self.kind,
            "title": self.title,
            "description": self.description,
            "file": self.file,
            "priority": self.priority,
            "effort": self.effort,
        }
        if self.line is not None:
            payload["line"] = self.line
        return payload


@dataclass
class QualityMetrics:
    complexity_average: float = 0.0
    complexity_max: int = 0
    complexity_distribution: Dict[str, int] = field(
        default_factory=lambda: {"low": 0, "medium": 0, "high": 0}
    )
    function_coverage: float = 0.0
    maintainability: float = 100.0
    debt_hours: float = 0.0
    debt_issues: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexity": {
                "average": self.complexity_average,
                "max": self.complexity_max,
                "distribution": dict(self.complexity_distribution),
            },
            "coverage": {"functions": self.function_coverage},
            "maintainability": self.maintainability,
            "technical_debt": {"hours": self.debt_hours, "issues": self.debt_issues},
        }


@dataclass
class AnalysisResult:
    """Aggregate root produced once per run."""
    files: List[SourceFile]
    relationships: List[Relationship]
    issues: List[Issue]
    suggestions: List[Suggestion]
    metrics: QualityMetrics
    project_name: str = ""
    analyzed_at: str = ""

    def file_ids(self) -> List[str]:
        return [f.id for f in self.files]

    def get_file(self, file_id: str) -> Optional[SourceFile]:
        for f in self.files:
            if f.id == file_id:
                return f
        return None

    def to_dict(self, include_content: bool = False) -> Dict[str, Any]:
        return {
            "name": self.project_name,
            "analyzedAt": self.analyzed_at,
            "status": "completed",
            "files": [f.to_dict(include_content=include_content) for f in self.files],
            "relationships": [r.to_dict() for r in self.relationships],
            "errors": [i.to_dict() for i in self.issues],
            "suggestions": [s.to_dict() for s in self.suggestions],
            "metrics": self.metrics.to_dict(),
        }
