#!/usr/bin/env python3
"""
ETF Allocator CLI Entry Point
=============================
Minimal wrapper around etf_allocator.cli for use without installation.

Usage:
    python scripts/build_portfolio.py catalogo.csv --config piano.yaml
    # or after pip install -e .
    etf-allocator catalogo.csv --config piano.yaml
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from etf_allocator.cli import main


if __name__ == "__main__":
    sys.exit(main())
