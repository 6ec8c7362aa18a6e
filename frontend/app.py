# frontend/app.py

import argparse
import logging
import threading

from flask import Flask

from backend.board import MinesweeperBoard
from backend.utils import BoardDefinitionError, generate_random_bombs, load_board_definition
from frontend.api import api_blueprint
from frontend.config import DEFAULT_SIZE, ServerConfig, load_config
from frontend.server import MinesweeperServer

logger = logging.getLogger(__name__)


def create_app(server: MinesweeperServer) -> Flask:
    app = Flask(__name__)
    app.config["MINESWEEPER_SERVER"] = server
    app.register_blueprint(api_blueprint, url_prefix="/api")

    class _StatusLogFilter(logging.Filter):
        def filter(self, record: logging.LogRecord) -> bool:
            return "GET /api/" not in record.getMessage()

    logging.getLogger("werkzeug").addFilter(_StatusLogFilter())
    return app


def parse_size(value: str):
    try:
        width, height = (int(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must look like WIDTH,HEIGHT, got {value!r}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got {value!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multiplayer Minesweeper server.")
    parser.add_argument("--config", default="config/server.yaml", help="path to server config yaml")
    parser.add_argument("--debug", dest="debug", action="store_true", default=None, help="hitting a bomb does not disconnect the player")
    parser.add_argument("--no-debug", dest="debug", action="store_false")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None, help="port to accept players on")
    board_group = parser.add_mutually_exclusive_group()
    board_group.add_argument("--file", dest="board_file", default=None, help="board definition file")
    board_group.add_argument("--size", type=parse_size, default=None, help="random board of WIDTH,HEIGHT")
    parser.add_argument("--seed", type=int, default=None, help="seed for random boards")
    parser.add_argument("--web-port", type=int, default=None, help="serve the HTTP status API on this port")
    parser.add_argument("--log-level", default=None)
    return parser


def resolve_config(args) -> ServerConfig:
    """Merge the YAML config file with command-line overrides."""
    config = load_config(args.config)
    for key in ("debug", "host", "port", "seed", "web_port", "log_level"):
        value = getattr(args, key)
        if value is not None:
            setattr(config, key, value)
    # A board chosen on the command line replaces whichever one the file picked.
    if args.board_file is not None:
        config.board_file, config.size = args.board_file, None
    elif args.size is not None:
        config.board_file, config.size = None, args.size
    if config.board_file and config.size:
        raise ValueError("Config sets both board_file and size; choose one")
    return config


def build_board(config: ServerConfig) -> MinesweeperBoard:
    if config.board_file:
        width, height, bombs = load_board_definition(config.board_file)
    else:
        width, height = config.size or DEFAULT_SIZE
        bombs = generate_random_bombs(width, height, probability=config.bomb_probability, seed=config.seed)
    return MinesweeperBoard(width, height, bombs)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    try:
        board = build_board(config)
    except (BoardDefinitionError, ValueError) as exc:
        logger.error("Cannot load board: %s", exc)
        raise SystemExit(1)
    logger.info("Loaded %dx%d board with %d bombs", board.width, board.height, board.bombs_remaining())

    server = MinesweeperServer(config.host, config.port, board, debug=config.debug)
    server.start()
    if config.web_port is not None:
        app = create_app(server)
        web_thread = threading.Thread(
            target=app.run,
            kwargs={"host": config.web_host, "port": config.web_port, "threaded": True, "use_reloader": False},
            daemon=True,
        )
        web_thread.start()
        logger.info("Status API on http://%s:%d/api/state", config.web_host, config.web_port)

    try:
        server.thread.join()
    except KeyboardInterrupt:
        pass
    finally:
        server.stop()


if __name__ == "__main__":
    main()
