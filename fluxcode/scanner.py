"""File supplier: walks a project directory and reads its text files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Set

from .config import DEFAULT_MAX_FILE_SIZE
from .exceptions import EmptyProjectError
from .models import FileInput

logger = logging.getLogger(__name__)

SKIP_DIRS: Set[str] = {
    "node_modules", ".git", ".svn", ".hg", "__MACOSX",
    ".vscode", ".idea", "dist", "build", "coverage",
    ".next", ".nuxt", ".cache", ".turbo", "__pycache__",
    ".venv", "venv",
}

SKIP_FILE_NAMES: Set[str] = {".DS_Store"}
SKIP_SUFFIXES: Set[str] = {".log", ".tmp", ".cache"}

TEXT_EXTENSIONS: Set[str] = {
    ".js", ".jsx", ".mjs", ".cjs", ".ts", ".mts", ".cts", ".tsx", ".vue", ".svelte",
    ".html", ".htm", ".css", ".scss", ".sass", ".less",
    ".json", ".xml", ".yaml", ".yml", ".toml",
    ".md", ".txt", ".py", ".php", ".rb", ".go",
    ".java", ".c", ".cpp", ".h", ".hpp",
    ".sh", ".bash", ".zsh", ".fish",
    ".sql", ".graphql", ".gql",
}

LANGUAGE_MAP = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescript",
    ".vue": "vue",
    ".svelte": "svelte",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".sass": "sass",
    ".less": "less",
    ".json": "json",
    ".xml": "xml",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
    ".py": "python",
    ".php": "php",
    ".rb": "ruby",
    ".go": "go",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".sql": "sql",
}


def language_for(extension: str) -> str:
    return LANGUAGE_MAP.get(extension.lower(), "text")


def is_text_file(path: Path) -> bool:
    return path.suffix.lower() in TEXT_EXTENSIONS


def _skipped(rel_parts: tuple) -> bool:
    if any(part in SKIP_DIRS for part in rel_parts[:-1]):
        return True
    name = rel_parts[-1]
    return name in SKIP_FILE_NAMES or Path(name).suffix.lower() in SKIP_SUFFIXES


def collect_files(root: Path, max_file_size: Optional[int] = None) -> List[FileInput]:
    """Read every analyzable text file under *root*.

    Args:
        root: Project directory.
        max_file_size: Files larger than this many bytes are skipped.

    Returns:
        ``FileInput`` records sorted by relative POSIX path.

    Raises:
        EmptyProjectError: If *root* is not a readable directory.
    """
    if not root.is_dir():
        raise EmptyProjectError("Project root is not a readable directory", {"path": str(root)})
    limit = DEFAULT_MAX_FILE_SIZE if max_file_size is None else max_file_size

    collected: List[FileInput] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for filename in filenames:
            file_path = Path(dirpath) / filename
            rel = file_path.relative_to(root)
            if _skipped(rel.parts) or not is_text_file(file_path):
                continue
            try:
                size = file_path.stat().st_size
                if size > limit:
                    logger.info("Skipping %s (%d bytes exceeds limit)", rel.as_posix(), size)
                    continue
                text = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.warning("Could not read %s: %s", file_path, exc)
                continue
            ext = file_path.suffix.lower()
            collected.append(FileInput(
                path=rel.as_posix(),
                text=text,
                extension=ext,
                language=language_for(ext),
                size=size,
            ))

    collected.sort(key=lambda f: f.path)
    logger.debug("Collected %d files under %s", len(collected), root)
    return collected
