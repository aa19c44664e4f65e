import chess

class ChessBoard:
    """Game-loop side of the board: validates and applies moves from either player."""

    def __init__(self, fen=chess.STARTING_FEN):
        self.board = chess.Board(fen)

    def move(self, move_uci):
        move = chess.Move.from_uci(move_uci)
        return self.apply(move)

    def apply(self, move):
        if move is not None and move in self.board.legal_moves:
            self.board.push(move)
            return True
        return False

    def is_game_over(self):
        return self.board.is_game_over()

    def get_board(self):
        return self.board

    def reset(self):
        self.board.reset()
