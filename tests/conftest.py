"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import csvtable...' works, and
isolates every test from CSVTABLE_* variables and the cached settings.
"""
import os
import sys
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from csvtable.config.settings import reset_settings  # noqa: E402


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Clear CSVTABLE_* environment variables and the settings singleton."""
    for name in list(os.environ):
        if name.startswith("CSVTABLE_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
