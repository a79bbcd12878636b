#!/usr/bin/env python3
"""
Gasket Visualization Runner
Convenience script to visualize the latest saved gasket run from the project root.
"""

import sys
from pathlib import Path

# Add src/py to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent / "src" / "py"))

from visualize_gasket import main

if __name__ == "__main__":
    points, _ = main()
    sys.exit(0 if points is not None else 1)
