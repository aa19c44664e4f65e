"""
Chess move selector

Chooses the computer's move from an opening book, a heuristic early-game
rule, or a shallow minimax search with alpha-beta pruning. Chess rules
(legal moves, game over, FEN) come from python-chess.
"""

__version__ = "1.0.0"
__author__ = "Chess Engine Team"

from .engine import Engine, MinimaxEngine
from .evaluation import BaseEvaluator, MaterialEvaluator, create_evaluator
from .heuristics import HeuristicOpener, would_blunder
from .opening_book import OpeningBook, OpeningBookError, position_key

__all__ = [
    "Engine",
    "MinimaxEngine",
    "BaseEvaluator",
    "MaterialEvaluator",
    "create_evaluator",
    "HeuristicOpener",
    "would_blunder",
    "OpeningBook",
    "OpeningBookError",
    "position_key",
]
