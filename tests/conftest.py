"""
Shared test fixtures and configuration for pytest.
"""

import json
import logging
import sys
from pathlib import Path
from typing import List

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from logexport.core.models import SearchHit


logger = logging.getLogger(__name__)


# ============================================================================
# Helpers
# ============================================================================

def make_hit(doc_id: str, timestamp=None, message=None, **fields) -> SearchHit:
    """Build a hit whose payload is JSON bytes, like a raw search response."""
    document = dict(fields)
    if timestamp is not None:
        document["@timestamp"] = timestamp
    if message is not None:
        document["message"] = message
    return SearchHit(doc_id=doc_id, source=json.dumps(document).encode("utf-8"))


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def output_dir(tmp_path) -> Path:
    """Fixture providing an existing, empty output directory."""
    path = tmp_path / "logdir"
    path.mkdir()
    return path


@pytest.fixture
def sample_hits() -> List[SearchHit]:
    """Fixture providing three valid hits spanning two hour buckets."""
    return [
        make_hit("1", "2024-01-01T10:15:00Z", "a"),
        make_hit("2", "2024-01-01T10:45:00Z", "b"),
        make_hit("3", "2024-01-01T11:05:00Z", "c"),
    ]


@pytest.fixture
def hit_factory():
    """Fixture providing the make_hit helper."""
    return make_hit
