from .board import MinesweeperBoard
from .game import GameSession, PlayerCounter

__all__ = ['MinesweeperBoard', 'GameSession', 'PlayerCounter']
