"""
Pytest configuration for the epicycles test suite.

Qt runs on the offscreen platform so the view tests need no display.
"""

import os
import sys
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add project root to Python path for runs without an installed package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
