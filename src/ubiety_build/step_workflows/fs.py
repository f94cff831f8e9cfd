# step_workflows/fs.py
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, List

from ..ui.console import get_console


def glob_directories(root: Path, *patterns: str) -> List[Path]:
    """Directories under root matching any pattern (e.g. "**/bin")."""
    if not root.is_dir():
        return []
    found = {p for pattern in patterns for p in root.glob(pattern) if p.is_dir()}
    # deepest first, so a parent is never removed before its children are listed
    return sorted(found, key=lambda p: (-len(p.parts), str(p)))


def delete_directories(paths: Iterable[Path]) -> None:
    console = get_console()
    for path in paths:
        if path.exists():
            console.print_debug(f"Deleting {path}")
            shutil.rmtree(path)


def ensure_clean_directory(path: Path) -> None:
    """Create path if missing, otherwise remove everything inside it."""
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"Not a directory: {path}")
    path.mkdir(parents=True, exist_ok=True)
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def clean_build_outputs(root: Path) -> None:
    """Remove every bin/ and obj/ directory below root."""
    delete_directories(glob_directories(root, "**/bin", "**/obj"))
