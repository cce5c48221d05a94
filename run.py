#!/usr/bin/env python3
"""
run.py - Main entry point for the terminal Connect Four game

Usage:
    python run.py play [--debug] [--log-file game.log] [--no-color]
    python run.py check --position 0,0,...,1,2
"""

import os
import sys

# Add the project root to Python path to ensure imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from c4term.interfaces.cli import main


if __name__ == "__main__":
    sys.exit(main())
