# backend/utils.py

from typing import List, Optional, Tuple

import numpy as np


class BoardDefinitionError(ValueError):
    """Raised when a board-definition file cannot be turned into a board."""


def load_board_definition(path: str) -> Tuple[int, int, np.ndarray]:
    """
    Read a board-definition file and return (width, height, bombs).

    The file starts with a header line "W H", followed by exactly H lines of
    W space-separated 0/1 flags. bombs[y][x] is True where the file has a 1.
    Trailing blank lines are ignored.
    """
    try:
        with open(path, "r") as f:
            lines = f.read().splitlines()
    except OSError as exc:
        raise BoardDefinitionError(f"Cannot read board file {path}: {exc}") from exc

    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        raise BoardDefinitionError(f"{path}: empty board file")

    header = lines[0].split()
    if len(header) != 2:
        raise BoardDefinitionError(f"{path}:1: expected 'WIDTH HEIGHT', got {lines[0]!r}")
    try:
        width, height = int(header[0]), int(header[1])
    except ValueError as exc:
        raise BoardDefinitionError(f"{path}:1: dimensions must be integers") from exc
    if width <= 0 or height <= 0:
        raise BoardDefinitionError(f"{path}:1: dimensions must be positive, got {width}x{height}")

    rows = lines[1:]
    if len(rows) != height:
        raise BoardDefinitionError(f"{path}: expected {height} rows, found {len(rows)}")

    bombs = np.zeros((height, width), dtype=bool)
    for y, line in enumerate(rows):
        tokens = line.split()
        if len(tokens) != width:
            raise BoardDefinitionError(
                f"{path}:{y + 2}: expected {width} cells, found {len(tokens)}"
            )
        for x, token in enumerate(tokens):
            if token not in ("0", "1"):
                raise BoardDefinitionError(f"{path}:{y + 2}: invalid cell {token!r}")
            bombs[y, x] = token == "1"

    return width, height, bombs


def generate_random_bombs(width: int, height: int, probability: float = 0.25, seed: Optional[int] = None) -> np.ndarray:
    """
    Build a (height, width) bomb layout where every cell independently holds a
    bomb with the given probability.
    """
    if width <= 0 or height <= 0:
        raise BoardDefinitionError(f"Board dimensions must be positive, got {width}x{height}")
    rng = np.random.default_rng(seed)
    return rng.random((height, width)) < probability


def get_neighbors(x: int, y: int, width: int, height: int) -> List[Tuple[int, int]]:
    """
    Return a list of valid neighboring coordinates (8-way) for (x, y).
    """
    neighbors = []
    for dy in [-1, 0, 1]:
        for dx in [-1, 0, 1]:
            nx, ny = x + dx, y + dy
            if (dx != 0 or dy != 0) and 0 <= nx < width and 0 <= ny < height:
                neighbors.append((nx, ny))
    return neighbors
