"""Root conftest.py: makes the local colocated package and tests importable."""

from __future__ import annotations

import sys
from pathlib import Path

# Insert the project root at the front of sys.path so that
# `import colocated` always resolves to the local source tree,
# even if another version is installed in the environment.
_root = str(Path(__file__).parent)
if _root not in sys.path:
    sys.path.insert(0, _root)
