"""Pytest configuration for js2ts test suite."""

import sys
from pathlib import Path

import pytest

# Add project root to path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def project(tmp_path: Path):
    """Write a tree of files under a temporary root. Returns the root."""

    def make(files: dict[str, str]) -> Path:
        for name, text in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return tmp_path

    return make
