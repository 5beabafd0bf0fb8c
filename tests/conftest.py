from __future__ import annotations

import sys
from pathlib import Path

# src/ holds top-level packages (models, checks, store, ...); put it on the path before test imports
_src_dir = Path(__file__).resolve().parents[1] / "src"
_src_str = str(_src_dir)
if _src_str not in sys.path:
    sys.path.insert(0, _src_str)

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Ensure src directory is on sys.path so tests can import modules."""
    if _src_str not in sys.path:
        sys.path.insert(0, _src_str)
