# backend/game.py

import logging
import re
import threading
from typing import Optional

from .board import BOOM, MinesweeperBoard

logger = logging.getLogger(__name__)

GREETING = (
    "Welcome to Minesweeper. Board: {width} columns by {height} rows. "
    "Players: {players} including you. Type 'help' for help."
)
HELP_MESSAGE = (
    "Commands: look | dig X Y | flag X Y | deflag X Y | help | bye "
    "(X is the column, Y the row, both counted from 0)"
)
ERROR_MESSAGE = "Unrecognized command. Type 'help' for help."
BOOM_MESSAGE = "BOOM"

COMMAND_PATTERN = re.compile(
    r"(?P<verb>look|help|bye)"
    r"|(?P<action>dig|flag|deflag) (?P<x>-?\d+) (?P<y>-?\d+)"
)


class PlayerCounter:
    """
    Number of players currently connected, shared by every connection.
    """

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def join(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def leave(self) -> int:
        with self._lock:
            self._count -= 1
            return self._count

    @property
    def count(self) -> int:
        with self._lock:
            return self._count


class GameSession:
    """
    One connected player's view of the shared board.

    The session turns each protocol line into a board operation and the reply
    to send back. It holds no board state of its own, only whether this
    connection is still alive and whether it ended on a bomb.
    """

    def __init__(self, board: MinesweeperBoard, debug: bool = False):
        self.board = board
        self.debug = debug
        self.alive = True
        self.boomed = False

    def greeting(self, players: int) -> str:
        return GREETING.format(width=self.board.width, height=self.board.height, players=players) + "\n"

    def step(self, line: str) -> dict:
        """
        Apply one command line.

        Returns a dict with the text to send back ("reply", None when nothing is
        sent) and whether the connection stays open ("alive").
        """
        if not self.alive:
            return self._result(None)

        match = COMMAND_PATTERN.fullmatch(line.strip())
        if match is None:
            logger.debug("Unrecognized command %r", line)
            return self._result(ERROR_MESSAGE + "\n")

        verb = match.group("verb")
        if verb == "look":
            return self._result(self.board.look())
        if verb == "help":
            return self._result(HELP_MESSAGE + "\n")
        if verb == "bye":
            self.alive = False
            return self._result(None)

        action = match.group("action")
        x, y = int(match.group("x")), int(match.group("y"))

        if action == "dig":
            return self._dig(x, y)

        with self.board.lock:
            if action == "flag":
                self.board.flag(x, y)
            else:
                self.board.deflag(x, y)
            return self._result(self.board.look())

    def _dig(self, x: int, y: int) -> dict:
        with self.board.lock:
            outcome = self.board.dig(x, y)
            if outcome != BOOM:
                return self._result(self.board.look())

        logger.info("BOOM at (%d, %d)%s", x, y, " [debug]" if self.debug else "")
        if not self.debug:
            self.boomed = True
            self.alive = False
        return self._result(BOOM_MESSAGE + "\n")

    def _result(self, reply: Optional[str]) -> dict:
        return {"reply": reply, "alive": self.alive}
