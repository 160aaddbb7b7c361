"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure backend root is on path when running pytest from repo root or backend
backend = Path(__file__).resolve().parent.parent
if str(backend) not in sys.path:
    sys.path.insert(0, str(backend))


@pytest.fixture(autouse=True)
def _reset_limiter():
    """slowapi keeps hit counts in memory across tests; start each test fresh."""
    import main
    main.limiter.reset()
    yield
