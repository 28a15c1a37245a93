"""Project-level pytest configuration."""
import os
import sys

# Make the card_paginator package importable when pytest runs from the repository root
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)
