"""Pytest configuration for the unused strings tools."""

import sys
from pathlib import Path

import pytest

# The tools are top-level scripts; make them importable without installing
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))


STRINGS_FILE = "en.lproj/Localizable.strings"


class Project:
    """Target directory with a strings file and source files."""

    def __init__(self, root: Path):
        self.root = root

    @property
    def strings_path(self) -> Path:
        return self.root / STRINGS_FILE

    def write_strings(self, content: str) -> Path:
        self.strings_path.parent.mkdir(parents=True, exist_ok=True)
        self.strings_path.write_text(content, encoding="utf-8")
        return self.strings_path

    def write_source(self, name: str, content: str) -> Path:
        path = self.root / name
        path.write_text(content, encoding="utf-8")
        return path


@pytest.fixture
def project(tmp_path):
    return Project(tmp_path)
