import chess

try:
    from .engine import MinimaxEngine
except ImportError:
    from engine import MinimaxEngine

class Player:
    def __init__(self, color):
        self.color = color

    def get_move(self, board):
        raise NotImplementedError

class HumanPlayer(Player):
    def get_move(self, board):
        # Human move will be handled by the presentation layer
        return None

class ComputerPlayer(Player):
    """Asks the engine for a move, but only on its own turn."""

    def __init__(self, color=chess.BLACK, engine=None):
        super().__init__(color)
        self.engine = engine or MinimaxEngine()

    def get_move(self, board):
        if board.turn != self.color:
            return None
        return self.engine.get_move(board)
