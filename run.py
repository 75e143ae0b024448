#!/usr/bin/env python3
"""
Wrapper so the CLI runs from a source checkout without installing.
Adds src/ to the import path before importing main.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    from main import main

    sys.exit(main())
