from __future__ import annotations

from pathlib import Path


def find_project_root(marker: str = "pyproject.toml", start: Path | None = None) -> Path:
    """
    Find the project root by searching upwards from ``start`` for a marker file.

    The search starts in the current working directory when ``start`` is None.
    """
    current_dir = (start or Path.cwd()).resolve()
    for directory in (current_dir, *current_dir.parents):
        if (directory / marker).exists():
            return directory
    raise FileNotFoundError(f"Project root marker '{marker}' not found.")
