"""Import resolution against the set of project files known to this run."""

from __future__ import annotations

import posixpath
from typing import Iterable, List, Optional

from .config import RESOLVE_EXTENSIONS
from .models import ImportFact


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../")


class ImportResolver:
    """Decides which import specifiers point at a known project file.

    Only project-local existence is checked: bare (package) specifiers are
    always considered resolved. Resolution is a pure function of the
    specifier, the importing file's path and the file-id set, so repeated
    runs over the same set give identical answers.
    """

    def __init__(self, file_ids: Iterable[str], extensions: Optional[List[str]] = None) -> None:
        self.file_ids = frozenset(file_ids)
        self.extensions = list(extensions or RESOLVE_EXTENSIONS)

    def candidates(self, specifier: str, current_file: str) -> List[str]:
        """Ordered candidate file ids for a relative *specifier*."""
        joined = posixpath.normpath(posixpath.join(posixpath.dirname(current_file), specifier))
        if joined == ".." or joined.startswith("../"):
            return []
        base = "" if joined == "." else joined
        found: List[str] = []
        if base:
            found.append(base)
            found.extend(base + ext for ext in self.extensions)
        index = posixpath.join(base, "index") if base else "index"
        found.extend(index + ext for ext in self.extensions)
        return found

    def resolve(self, specifier: str, current_file: str) -> Optional[str]:
        """Return the id of the file *specifier* points at, or None.

        Non-relative specifiers return None: they never map to a project
        file, although :meth:`is_resolved` treats them as resolved.
        """
        if not is_relative_specifier(specifier):
            return None
        for candidate in self.candidates(specifier, current_file):
            if candidate in self.file_ids:
                return candidate
        return None

    def is_resolved(self, specifier: str, current_file: str) -> bool:
        if not is_relative_specifier(specifier):
            return True
        return self.resolve(specifier, current_file) is not None

    def resolve_imports(self, imports: Iterable[ImportFact], current_file: str) -> None:
        """Set ``is_resolved`` on every fact of one file."""
        for fact in imports:
            fact.is_resolved = self.is_resolved(fact.source, current_file)
