"""Pytest configuration and fixtures for test suite."""

import sys
from collections.abc import Callable, Hashable
from pathlib import Path

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from refmatch.models import Reference  # noqa: E402

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


@pytest.fixture
def make_reference() -> Callable[..., Reference]:
    """Factory for references with a default title and no identifiers."""

    def _factory(
        ref_id: Hashable,
        title: str = "",
        *,
        year: int | None = None,
        doi: str | None = None,
        pmid: str | None = None,
    ) -> Reference:
        return Reference(id=ref_id, title=title, year=year, doi=doi, pmid=pmid)

    return _factory


@pytest.fixture
def schemas_dir() -> Path:
    """Directory holding the bundled JSON schemas."""
    return SCHEMAS_DIR
