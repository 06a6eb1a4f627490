"""Pytest configuration and fixtures for Fluxcode tests."""

import posixpath
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from fluxcode.config_manager import AnalysisSettings
from fluxcode.engine import AnalysisEngine
from fluxcode.extractor import StructuralExtractor
from fluxcode.models import FileInput
from fluxcode.scanner import language_for
from fluxcode.syntax import TreeSitterAdapter


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch) -> Path:
    """Point the config home at a throwaway directory for every test.

    Keeps a developer's ~/.fluxcode/config.toml from leaking thresholds
    into assertions.
    """
    home = tmp_path_factory.mktemp("fluxcode_home")
    monkeypatch.setattr("fluxcode.config.BASE_DIR", home)
    monkeypatch.setattr("fluxcode.config.CONFIG_FILE", home / "config.toml")
    return home / "config.toml"


@pytest.fixture
def config_file(_isolated_config: Path) -> Path:
    """Path of the isolated config file (may not exist yet)."""
    return _isolated_config


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture(scope="session")
def adapter() -> TreeSitterAdapter:
    """One adapter for the whole session; grammar loading is the slow part."""
    return TreeSitterAdapter()


@pytest.fixture
def extractor(adapter: TreeSitterAdapter) -> StructuralExtractor:
    return StructuralExtractor(adapter)


@pytest.fixture
def engine(adapter: TreeSitterAdapter) -> AnalysisEngine:
    return AnalysisEngine(AnalysisSettings(max_workers=2), adapter=adapter)


@pytest.fixture
def make_input() -> Callable[[str, str], FileInput]:
    """Build a FileInput from a relative path and its text."""

    def _make(path: str, text: str) -> FileInput:
        ext = posixpath.splitext(path)[1].lower()
        return FileInput(path=path, text=text, extension=ext, language=language_for(ext))

    return _make
