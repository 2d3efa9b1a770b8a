#!/usr/bin/env python3
"""pyunifdef - top-level CLI wrapper

Compatible with Python 3.8+.

Usage examples:
  ./pyunifdef.py -DFOO -UBAR input.c -o output.c
  ./pyunifdef.py -s input.c
"""
from pyunifdef.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
