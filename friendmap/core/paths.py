#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the friendmap project.

The project structure:
    ROOT/
    ├── friendmap/     # Package code
    │   └── migrations/  # Alembic environment and revisions
    ├── data/          # Database files
    └── logs/          # Application logs

Paths are resolved relative to the package so that an editable install
keeps its data next to the checkout.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path

# ----- Package / project directories -----
PACKAGE_DIR: Path = Path(__file__).resolve().parent.parent
ROOT: Path = PACKAGE_DIR.parent
DATA_DIR = ROOT / "data"

# --- Database ---
ALEMBIC_DIR = PACKAGE_DIR / "migrations"
DB_PATH = DATA_DIR / "friendmap.db"

# --- Logs ---
LOG_DIR = ROOT / "logs"
