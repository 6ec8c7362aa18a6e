# frontend/server.py

import logging
import socketserver
import threading
from typing import Optional

from backend.board import MinesweeperBoard
from backend.game import ERROR_MESSAGE, GameSession, PlayerCounter

logger = logging.getLogger(__name__)

# Longest command line accepted, in bytes; longer lines get an error reply.
MAX_LINE = 1024


class MinesweeperRequestHandler(socketserver.StreamRequestHandler):
    """Runs one player's session for as long as the connection lasts."""

    def handle(self):
        server = self.server
        players = server.players.join()
        logger.info("Client %s connected (%d players)", self.client_address, players)
        try:
            session = GameSession(server.board, debug=server.debug)
            self._send(session.greeting(players))
            while session.alive:
                raw = self.rfile.readline(MAX_LINE + 1)
                if not raw:
                    break
                if len(raw) > MAX_LINE and not raw.endswith(b"\n"):
                    logger.debug("Discarding overlong line from %s", self.client_address)
                    if not self._skip_line():
                        break
                    self._send(ERROR_MESSAGE + "\n")
                    continue
                result = session.step(raw.decode("utf-8", errors="replace"))
                if result["reply"] is not None:
                    self._send(result["reply"])
        except OSError as exc:
            logger.debug("Connection %s failed: %s", self.client_address, exc)
        finally:
            remaining = server.players.leave()
            logger.info("Client %s disconnected (%d players)", self.client_address, remaining)

    def _skip_line(self) -> bool:
        """Drop input up to the next newline. Returns False on EOF."""
        while True:
            chunk = self.rfile.readline(MAX_LINE + 1)
            if not chunk:
                return False
            if chunk.endswith(b"\n"):
                return True

    def _send(self, text: str):
        self.wfile.write(text.encode("utf-8"))
        self.wfile.flush()


class MinesweeperServer(socketserver.ThreadingTCPServer):
    """
    Accepts player connections and runs each one in its own thread against the
    one shared board.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, host: str, port: int, board: MinesweeperBoard, debug: bool = False):
        super().__init__((host, port), MinesweeperRequestHandler)
        self.board = board
        self.debug = debug
        self.players = PlayerCounter()
        self.thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server_address[1]

    def start(self):
        """Serve in a background thread; the socket is already listening."""
        if self.thread is not None:
            return
        self.thread = threading.Thread(target=self.serve_forever, daemon=True)
        self.thread.start()
        logger.info("Minesweeper server listening on %s:%d (debug=%s)", self.server_address[0], self.port, self.debug)

    def stop(self):
        if self.thread is not None:
            self.shutdown()
            self.thread.join(timeout=3)
            self.thread = None
        self.server_close()
        logger.info("Minesweeper server stopped.")
