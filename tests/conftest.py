"""Shared test setup for the FontLens test suite.

Run with:
    python3 -m pytest tests -v
"""

import sys
from pathlib import Path

# Make the src layout importable without an install.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))
