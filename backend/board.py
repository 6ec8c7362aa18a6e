import threading

import numpy as np

from .utils import get_neighbors

# Cell states, stored as small integers in the state array
UNTOUCHED = 0
FLAGGED = 1
DUG = 2

# Outcomes of a dig
NO_CHANGE = "no_change"
REVEALED = "revealed"
BOOM = "boom"


class MinesweeperBoard:
    """
    A minefield shared by every connected player.

    Cells are addressed as (x, y) with x the column and y the row. Internally
    the three per-cell arrays are indexed [y, x]:
        state  - UNTOUCHED, FLAGGED or DUG
        bombs  - True while the cell holds a bomb
        counts - number of neighbors currently holding a bomb

    All public methods take the board lock, so each call is atomic with respect
    to every other call. Callers that need several calls to appear as one (a
    dig followed by the look() sent back to the player) can hold `lock`
    themselves; it is re-entrant.
    """

    def __init__(self, width, height, bombs):
        if width <= 0 or height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {width}x{height}")

        bombs = np.asarray(bombs, dtype=bool)
        if bombs.shape != (height, width):
            raise ValueError(
                f"Bomb layout has shape {bombs.shape}, expected ({height}, {width})"
            )

        self.width = width
        self.height = height
        self.lock = threading.RLock()

        self.state = np.full((height, width), UNTOUCHED, dtype=np.int8)
        self.bombs = bombs.copy()
        self.counts = np.zeros((height, width), dtype=np.int8)

        self._init_counts()

    def _init_counts(self):
        # One pass over the bomb cells; from here on counts are only decremented.
        for y, x in zip(*np.nonzero(self.bombs)):
            for nx, ny in self.neighbors(int(x), int(y)):
                self.counts[ny, nx] += 1

    def is_valid_coord(self, x, y):
        for value in (x, y):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                return False
        return 0 <= x < self.width and 0 <= y < self.height

    def neighbors(self, x, y):
        return get_neighbors(x, y, self.width, self.height)

    def _require_valid(self, x, y):
        if not self.is_valid_coord(x, y):
            raise ValueError(f"Invalid coordinates ({x}, {y})")
        return int(x), int(y)

    def get_state(self, x, y) -> int:
        x, y = self._require_valid(x, y)
        with self.lock:
            return int(self.state[y, x])

    def has_bomb(self, x, y) -> bool:
        x, y = self._require_valid(x, y)
        with self.lock:
            return bool(self.bombs[y, x])

    def neighbor_count(self, x, y) -> int:
        x, y = self._require_valid(x, y)
        with self.lock:
            return int(self.counts[y, x])

    def bombs_remaining(self) -> int:
        with self.lock:
            return int(np.count_nonzero(self.bombs))

    def dig(self, x, y) -> str:
        """
        Dig the cell at (x, y).

        - out of bounds, flagged or already dug: nothing happens, NO_CHANGE
        - bomb: the bomb is removed and every neighbor's count drops by one
          before returning, BOOM
        - otherwise REVEALED

        In both of the last two cases, a cell left with no bomb neighbors opens
        its untouched neighbors, and so on outward (flood fill). Flagged cells
        stop the fill.
        """
        if not self.is_valid_coord(x, y):
            return NO_CHANGE
        x, y = int(x), int(y)

        with self.lock:
            if self.state[y, x] != UNTOUCHED:
                return NO_CHANGE

            self.state[y, x] = DUG
            outcome = REVEALED
            if self.bombs[y, x]:
                self._remove_bomb(x, y)
                outcome = BOOM

            if self.counts[y, x] == 0:
                self._flood_fill(x, y)
            return outcome

    def _remove_bomb(self, x, y):
        self.bombs[y, x] = False
        for nx, ny in self.neighbors(x, y):
            self.counts[ny, nx] -= 1

    def _flood_fill(self, x, y):
        # Cells are marked DUG before being pushed, so each is visited once.
        stack = [(x, y)]
        while stack:
            cx, cy = stack.pop()
            for nx, ny in self.neighbors(cx, cy):
                if self.state[ny, nx] != UNTOUCHED:
                    continue
                # A zero-count cell has no bomb neighbors, so nothing here is a bomb.
                self.state[ny, nx] = DUG
                if self.counts[ny, nx] == 0:
                    stack.append((nx, ny))

    def flag(self, x, y) -> bool:
        if not self.is_valid_coord(x, y):
            return False
        x, y = int(x), int(y)
        with self.lock:
            if self.state[y, x] != UNTOUCHED:
                return False
            self.state[y, x] = FLAGGED
            return True

    def deflag(self, x, y) -> bool:
        if not self.is_valid_coord(x, y):
            return False
        x, y = int(x), int(y)
        with self.lock:
            if self.state[y, x] != FLAGGED:
                return False
            self.state[y, x] = UNTOUCHED
            return True

    def _cell_glyph(self, x, y):
        state = self.state[y, x]
        if state == UNTOUCHED:
            return "-"
        if state == FLAGGED:
            return "F"
        count = int(self.counts[y, x])
        return " " if count == 0 else str(count)

    def get_visible_state(self):
        """
        Return the board as a list of rows, each a list of one-character glyphs:
        '-' untouched, 'F' flagged, '1'-'8' dug next to that many bombs, ' ' dug
        with no bomb neighbors.
        """
        with self.lock:
            return [
                [self._cell_glyph(x, y) for x in range(self.width)]
                for y in range(self.height)
            ]

    def look(self) -> str:
        rows = self.get_visible_state()
        return "".join(" ".join(row) + "\n" for row in rows)
