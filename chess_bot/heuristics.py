"""
Heuristic early-game move picker.

A single pass over the legal moves at the root, without search. The first
move that either lands safely on a center square, develops a knight or
bishop safely, or castles is played.

"Safely" is a one-ply attacker/defender count on the destination square,
not a static exchange evaluation: piece values are ignored.
"""

import chess
from typing import Iterable, Optional

DEFAULT_CENTER_SQUARES = ("e5", "d5")
DEVELOPMENT_PIECES = (chess.KNIGHT, chess.BISHOP)


def count_attackers(board: chess.Board, square: chess.Square) -> int:
    """Number of distinct pieces of the side to move with a legal move onto square."""
    return len({move.from_square for move in board.legal_moves if move.to_square == square})


def count_defenders(board: chess.Board, square: chess.Square, color: chess.Color) -> int:
    """Number of unpinned pieces of color attacking square."""
    return sum(1 for defender in board.attackers(color, square) if not board.is_pinned(color, defender))


def would_blunder(board: chess.Board, move: chess.Move) -> bool:
    """
    Check whether a move leaves the moved piece outnumbered on its destination.

    The move is played on a copy; the opponent's attackers are their legal
    moves onto the square, our defenders are our remaining pieces covering it.

    Args:
        board: Position before the move (not modified)
        move: Candidate legal move

    Returns:
        True if attackers strictly outnumber defenders
    """
    mover = board.turn
    scratch = board.copy(stack=False)
    scratch.push(move)

    attackers = count_attackers(scratch, move.to_square)
    defenders = count_defenders(scratch, move.to_square, mover)
    return attackers > defenders


class HeuristicOpener:
    """Picks a plausible developing move at ply 0."""

    def __init__(self, center_squares: Iterable[str] = DEFAULT_CENTER_SQUARES,
                 development_pieces: Iterable[chess.PieceType] = DEVELOPMENT_PIECES):
        self.center_squares = frozenset(chess.parse_square(name) for name in center_squares)
        self.development_pieces = frozenset(development_pieces)

    def get_move(self, board: chess.Board, legal_moves: Optional[Iterable[chess.Move]] = None) -> Optional[chess.Move]:
        """
        Scan moves in enumeration order and return the first match.

        For each move the rules are tried in order: safe move to a center
        square, safe knight or bishop move, castling.

        Args:
            board: Current board state (not modified)
            legal_moves: Moves to scan, defaults to board.legal_moves

        Returns:
            The chosen move, or None to fall through to search
        """
        if legal_moves is None:
            legal_moves = board.legal_moves

        for move in legal_moves:
            if move.to_square in self.center_squares and not would_blunder(board, move):
                return move
            if board.piece_type_at(move.from_square) in self.development_pieces and not would_blunder(board, move):
                return move
            if board.is_castling(move):
                return move

        return None
