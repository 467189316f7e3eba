#!/usr/bin/env python3
"""
richtoken - placeholder and highlight token bridge for rich-text editors

Simple usage:
    python rt.py load letter.html                 # Show the document ops
    python rt.py roundtrip letter.html            # Check load -> extract is lossless
    python rt.py find letter.html "regards"       # Locate a phrase
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from richtoken.cli import app

if __name__ == "__main__":
    app()
