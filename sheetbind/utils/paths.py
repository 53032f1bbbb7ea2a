"""
RESPONSIBILITIES
- Resolve workbook destinations and their scratch files.
- Save workbooks atomically so a failed write never leaves a truncated file.
PROCESS OVERVIEW
1. tmp_path() names the sibling scratch file for a destination.
2. atomic_save() writes the workbook to the scratch file, then swaps it in.
3. The scratch file is removed when the save fails.
"""

from __future__ import annotations

import os
from pathlib import Path

from openpyxl import Workbook


def tmp_path(path: Path) -> Path:
    """Return the scratch file used while *path* is being written."""

    return path.with_name(path.name + ".tmp")


def atomic_save(workbook: Workbook, path: Path) -> None:
    """Save *workbook* to *path* through a temporary file swap."""

    path.parent.mkdir(parents=True, exist_ok=True)
    scratch = tmp_path(path)
    try:
        workbook.save(scratch)
        os.replace(scratch, path)
    finally:
        if scratch.exists():
            scratch.unlink()
