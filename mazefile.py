from __future__ import annotations

import logging
from pathlib import Path

from maze import Grid, Position

logger = logging.getLogger(__name__)


def load_text(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def save_text(text: str, path: str | Path) -> Path:
    """Write text to a new file. An existing file is never overwritten."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # "x" mode fails atomically when the file already exists.
    with path.open("x", encoding="utf-8", newline="\n") as fh:
        fh.write(text)
    logger.debug("wrote %s", path)
    return path


def load_grid(path: str | Path, start: Position, dest: Position) -> Grid:
    return Grid.parse(load_text(path), start, dest)


def save_grid(grid: Grid, path: str | Path) -> Path:
    return save_text(grid.serialize(), path)
