#!/usr/bin/env python3
"""
Sierpinski Gasket Runner
Convenience script to run the gasket generator from the project root.
"""

import sys
from pathlib import Path

# Add src/py to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent / "src" / "py"))

from gasket_cli import main

if __name__ == "__main__":
    sys.exit(main())
