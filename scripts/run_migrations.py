#!/usr/bin/env python
"""Run Alembic migrations from the project root (defaults to `upgrade head`)."""
from __future__ import annotations

import os
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

alembic_ini = project_root / "alembic.ini"
if "ALEMBIC_CONFIG" not in os.environ:
    if not alembic_ini.exists():
        print(f"ERROR: alembic.ini not found at {alembic_ini}", file=sys.stderr)
        sys.exit(1)
    os.environ["ALEMBIC_CONFIG"] = str(alembic_ini)

os.chdir(project_root)

from alembic.config import main as alembic_main

if __name__ == "__main__":
    args = sys.argv[1:] or ["upgrade", "head"]
    print(f"Running: alembic {' '.join(args)}", file=sys.stderr)
    alembic_main(argv=args)
