# tests/test_board.py

import threading
import unittest

import numpy as np

from backend.board import (
    BOOM, DUG, FLAGGED, NO_CHANGE, REVEALED, UNTOUCHED, MinesweeperBoard,
)
from backend.utils import get_neighbors


def make_board(width, height, bomb_cells=()):
    bombs = np.zeros((height, width), dtype=bool)
    for x, y in bomb_cells:
        bombs[y, x] = True
    return MinesweeperBoard(width, height, bombs)


class BoardTestCase(unittest.TestCase):

    def assertCountsConsistent(self, board):
        for y in range(board.height):
            for x in range(board.width):
                expected = sum(
                    1 for nx, ny in get_neighbors(x, y, board.width, board.height)
                    if board.has_bomb(nx, ny)
                )
                self.assertEqual(board.neighbor_count(x, y), expected, f"count at ({x}, {y})")


class TestMinesweeperBoard(BoardTestCase):

    def test_board_dimensions(self):
        board = make_board(5, 4)
        self.assertEqual(board.width, 5)
        self.assertEqual(board.height, 4)
        self.assertEqual(len(board.look().splitlines()), 4)
        self.assertEqual(board.look().splitlines()[0], "- - - - -")

    def test_invalid_dimensions(self):
        for width, height in [(0, 3), (3, 0), (-1, 2)]:
            with self.assertRaises(ValueError):
                MinesweeperBoard(width, height, np.zeros((max(height, 0), max(width, 0)), dtype=bool))

    def test_bomb_layout_shape_mismatch(self):
        with self.assertRaises(ValueError):
            MinesweeperBoard(3, 2, np.zeros((3, 2), dtype=bool))

    def test_single_cell_board(self):
        board = make_board(1, 1)
        self.assertFalse(board.has_bomb(0, 0))
        self.assertEqual(board.get_state(0, 0), UNTOUCHED)
        self.assertEqual(board.look(), "-\n")

    def test_initial_counts(self):
        board = make_board(5, 5, [(0, 0), (2, 2), (4, 4)])
        self.assertEqual(board.neighbor_count(1, 1), 2)
        self.assertEqual(board.neighbor_count(3, 3), 2)
        self.assertEqual(board.neighbor_count(4, 0), 0)
        self.assertEqual(board.neighbor_count(2, 2), 0)
        self.assertEqual(board.bombs_remaining(), 3)
        self.assertCountsConsistent(board)

    def test_accessors_reject_out_of_bounds(self):
        board = make_board(2, 2)
        with self.assertRaises(ValueError):
            board.get_state(2, 0)
        with self.assertRaises(ValueError):
            board.has_bomb(0, -1)

    def test_reveal_non_mine(self):
        board = make_board(3, 3, [(0, 0)])
        self.assertEqual(board.dig(1, 1), REVEALED)
        self.assertEqual(board.get_state(1, 1), DUG)
        self.assertEqual(board.get_state(0, 0), UNTOUCHED)
        self.assertEqual(board.get_state(2, 2), UNTOUCHED)
        self.assertEqual(board.look().splitlines()[1], "- 1 -")

    def test_flood_fill_clears_bomb_free_board(self):
        board = make_board(6, 6)
        self.assertEqual(board.dig(2, 3), REVEALED)
        for y in range(6):
            for x in range(6):
                self.assertEqual(board.get_state(x, y), DUG)
        self.assertNotIn("-", board.look())

    def test_flood_fill_on_large_board(self):
        board = make_board(300, 300)
        board.dig(0, 0)
        self.assertTrue((board.state == DUG).all())

    def test_flood_fill_stops_at_numbers_and_flags(self):
        board = make_board(5, 1, [(4, 0)])
        board.flag(1, 0)
        board.dig(0, 0)
        self.assertEqual(board.look(), "  F - - -\n")
        board.deflag(1, 0)
        board.dig(2, 0)
        self.assertEqual(board.look(), "      1 -\n")

    def test_dig_bomb(self):
        board = make_board(3, 3, [(0, 0), (2, 2)])
        self.assertEqual(board.neighbor_count(1, 1), 2)
        self.assertEqual(board.dig(0, 0), BOOM)
        self.assertEqual(board.get_state(0, 0), DUG)
        self.assertFalse(board.has_bomb(0, 0))
        self.assertEqual(board.neighbor_count(1, 1), 1)
        self.assertEqual(board.neighbor_count(1, 0), 0)
        self.assertEqual(board.neighbor_count(0, 1), 0)
        self.assertEqual(board.bombs_remaining(), 1)
        self.assertCountsConsistent(board)

    def test_dig_bomb_then_cascade(self):
        board = make_board(3, 3, [(1, 1)])
        self.assertEqual(board.dig(1, 1), BOOM)
        self.assertEqual(board.look(), "     \n     \n     \n")
        self.assertCountsConsistent(board)

    def test_dig_bomb_next_to_bomb_does_not_cascade(self):
        board = make_board(3, 1, [(0, 0), (1, 0)])
        self.assertEqual(board.dig(0, 0), BOOM)
        self.assertEqual(board.look(), "1 - -\n")

    def test_dig_is_idempotent(self):
        board = make_board(3, 3, [(0, 0)])
        board.dig(2, 2)
        before = board.look()
        self.assertEqual(board.dig(2, 2), NO_CHANGE)
        self.assertEqual(board.look(), before)

    def test_dig_flagged_cell(self):
        board = make_board(2, 2, [(0, 0)])
        self.assertTrue(board.flag(0, 0))
        self.assertEqual(board.dig(0, 0), NO_CHANGE)
        self.assertEqual(board.get_state(0, 0), FLAGGED)
        self.assertTrue(board.has_bomb(0, 0))

    def test_dig_out_of_bounds(self):
        board = make_board(2, 2)
        for x, y in [(-1, 0), (0, -1), (2, 0), (0, 2)]:
            self.assertEqual(board.dig(x, y), NO_CHANGE)
        self.assertEqual(board.look(), "- -\n- -\n")

    def test_non_integer_coordinates_are_ignored(self):
        board = make_board(3, 3)
        self.assertEqual(board.dig(1.9, 0), NO_CHANGE)
        self.assertEqual(board.dig("1", "0"), NO_CHANGE)
        self.assertEqual(board.dig(None, 0), NO_CHANGE)
        self.assertFalse(board.flag("0", 0))
        self.assertFalse(board.flag(True, 0))
        self.assertEqual(board.look(), "- - -\n- - -\n- - -\n")
        with self.assertRaises(ValueError):
            board.get_state(0.0, 0)

    def test_numpy_integer_coordinates(self):
        board = make_board(3, 3, [(2, 2)])
        self.assertTrue(board.flag(np.int64(2), np.int64(2)))
        self.assertEqual(board.get_state(np.int32(2), np.int32(2)), FLAGGED)

    def test_flag_and_deflag(self):
        board = make_board(3, 3)
        self.assertTrue(board.flag(1, 0))
        self.assertIn("F", board.look())
        self.assertFalse(board.flag(1, 0))
        self.assertTrue(board.deflag(1, 0))
        self.assertEqual(board.get_state(1, 0), UNTOUCHED)
        self.assertFalse(board.deflag(1, 0))
        self.assertFalse(board.flag(5, 5))
        self.assertFalse(board.deflag(-1, 0))

    def test_flag_and_deflag_dug_cell(self):
        board = make_board(2, 1, [(1, 0)])
        board.dig(0, 0)
        self.assertFalse(board.flag(0, 0))
        self.assertFalse(board.deflag(0, 0))
        self.assertEqual(board.get_state(0, 0), DUG)

    def test_counts_stay_consistent_through_a_game(self):
        rng = np.random.default_rng(7)
        bombs = rng.random((9, 11)) < 0.3
        board = MinesweeperBoard(11, 9, bombs)
        for _ in range(60):
            x, y = int(rng.integers(11)), int(rng.integers(9))
            if rng.random() < 0.2:
                board.flag(x, y)
            else:
                board.dig(x, y)
            self.assertCountsConsistent(board)


class TestConcurrentDigs(BoardTestCase):

    WIDTH = 120
    HEIGHT = 60

    def _layout(self):
        # A wall of bombs down the middle splits the board into two regions.
        bombs = np.zeros((self.HEIGHT, self.WIDTH), dtype=bool)
        bombs[:, self.WIDTH // 2] = True
        bombs[5, 5] = True
        bombs[40, 100] = True
        return bombs

    def _digs(self, left):
        if left:
            return [(0, 0), (5, 5), (10, 50)]
        return [(self.WIDTH - 1, 0), (100, 40), (80, 10)]

    def _play(self, board, moves):
        for x, y in moves:
            board.dig(x, y)

    def test_concurrent_digs_match_sequential(self):
        sequential = MinesweeperBoard(self.WIDTH, self.HEIGHT, self._layout())
        self._play(sequential, self._digs(True))
        self._play(sequential, self._digs(False))

        for _ in range(5):
            board = MinesweeperBoard(self.WIDTH, self.HEIGHT, self._layout())
            threads = [
                threading.Thread(target=self._play, args=(board, self._digs(left)))
                for left in (True, False)
            ]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
            self.assertEqual(board.look(), sequential.look())
            self.assertTrue((board.counts == sequential.counts).all())
            self.assertCountsConsistent(board)

    def test_look_never_sees_half_a_cascade(self):
        board = make_board(100, 100)
        seen = []

        def watch():
            for _ in range(20):
                seen.append(board.look().count("-"))

        watcher = threading.Thread(target=watch)
        watcher.start()
        board.dig(0, 0)
        watcher.join()
        for untouched in seen:
            self.assertIn(untouched, (0, 100 * 100))


if __name__ == "__main__":
    unittest.main()
