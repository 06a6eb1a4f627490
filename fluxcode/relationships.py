"""Project-wide relationship graph: import edges and heuristic call edges.

Call edges are inferred purely from text: every ``name(`` occurrence in a
file is matched against the functions declared in *other* files. Matching is
not scope aware, so two unrelated files declaring the same name both become
call targets.
"""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import SYNTHETIC_NAMES, FunctionFact, Relationship, SourceFile
from .resolver import ImportResolver

logger = logging.getLogger(__name__)

CALL_PATTERN = re.compile(r"\b(\w+)\s*\(")

IMPORT_STRENGTH = 0.8
CALL_STRENGTH = 0.6

# name -> [(file id, first function of that name in the file)]
FunctionIndex = Dict[str, List[Tuple[str, FunctionFact]]]


@dataclass
class CallMatch:
    """One textual call occurrence resolved to a function in another file."""
    source_file: str
    target_file: str
    name: str
    caller: Optional[FunctionFact]
    target: FunctionFact

    @property
    def caller_name(self) -> str:
        return self.caller.name if self.caller is not None else self.source_file

    @property
    def edge_id(self) -> str:
        return f"call-{self.source_file}-{self.target_file}-{self.name}"


def build_function_index(files: Iterable[SourceFile]) -> FunctionIndex:
    index: FunctionIndex = {}
    for source_file in files:
        seen = set()
        for fn in source_file.functions:
            if fn.name in SYNTHETIC_NAMES or fn.name in seen:
                continue
            seen.add(fn.name)
            index.setdefault(fn.name, []).append((source_file.id, fn))
    return index


class _LineLocator:
    """Maps character offsets of one text to 1-based line numbers."""

    def __init__(self, text: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self._starts, offset)


def _enclosing_function(functions: List[FunctionFact], line: int) -> Optional[FunctionFact]:
    best: Optional[FunctionFact] = None
    for fn in functions:
        end = fn.end_line or fn.line
        if fn.line <= line <= end:
            if best is None or (end - fn.line) <= ((best.end_line or best.line) - best.line):
                best = fn
    return best


def scan_calls(source_file: SourceFile, index: FunctionIndex) -> List[CallMatch]:
    """Find call-shaped names in one file that match other files' functions.

    Reads only shared, already complete data, so it may run concurrently
    for different files.
    """
    matches: List[CallMatch] = []
    content = source_file.content or ""
    locator: Optional[_LineLocator] = None

    for match in CALL_PATTERN.finditer(content):
        name = match.group(1)
        targets = index.get(name)
        if not targets:
            continue
        if locator is None:
            locator = _LineLocator(content)
        caller = _enclosing_function(source_file.functions, locator.line_of(match.start()))
        for target_file, target_fn in targets:
            if target_file == source_file.id:
                continue
            matches.append(CallMatch(
                source_file=source_file.id,
                target_file=target_file,
                name=name,
                caller=caller,
                target=target_fn,
            ))
    return matches


def apply_usage(matches: Iterable[CallMatch]) -> None:
    """Single-writer reduction of call matches into usage flags."""
    for match in matches:
        match.target.is_used = True
        if match.caller_name not in match.target.called_by:
            match.target.called_by.append(match.caller_name)
        if match.caller is not None and match.name not in match.caller.calls:
            match.caller.calls.append(match.name)


class RelationshipBuilder:
    """Builds the edge set once every file has been extracted."""

    def __init__(self, resolver: ImportResolver) -> None:
        self.resolver = resolver

    def build(self, files: List[SourceFile], mapper: Optional[Callable[..., Iterable]] = None) -> List[Relationship]:
        """Return deduplicated edges and update function usage flags.

        Args:
            files: The complete, extracted file set.
            mapper: Optional ``map``-like callable (e.g. ``executor.map``)
                used to scan files for calls in parallel.

        Returns:
            Import and call edges; order carries no meaning.
        """
        edges: Dict[str, Relationship] = {}

        for source_file in files:
            for edge in self.import_edges(source_file):
                edges.setdefault(edge.id, edge)

        index = build_function_index(files)

        def scanner(source_file: SourceFile) -> List[CallMatch]:
            return scan_calls(source_file, index)

        per_file = (mapper or map)(scanner, files)
        matches = [m for file_matches in per_file for m in file_matches]

        apply_usage(matches)
        for match in matches:
            edges.setdefault(match.edge_id, Relationship(
                id=match.edge_id,
                source=match.source_file,
                target=match.target_file,
                kind="function_call",
                strength=CALL_STRENGTH,
                bidirectional=False,
            ))

        logger.debug(
            "Built %d relationships from %d call matches across %d files",
            len(edges), len(matches), len(files),
        )
        return list(edges.values())

    def import_edges(self, source_file: SourceFile) -> List[Relationship]:
        found: List[Relationship] = []
        for fact in source_file.imports:
            if not (fact.is_resolved and fact.is_relative):
                continue
            target = self.resolver.resolve(fact.source, source_file.id)
            if target is None:
                continue
            found.append(Relationship(
                id=f"import-{source_file.id}-{target}",
                source=source_file.id,
                target=target,
                kind="import",
                strength=IMPORT_STRENGTH,
                bidirectional=False,
            ))
        return found
