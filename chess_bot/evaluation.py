"""
Chess Position Evaluation Module

This module provides a clean interface for scoring leaf positions reached
by the search. The default evaluator is a plain material counter with a
damping penalty and a small random jitter that breaks ties between
otherwise equal positions.

Sign convention: higher scores are better for Black. The computer plays
Black in the reference configuration, and the search always maximizes at
the root.
"""

import chess
import random
from abc import ABC, abstractmethod
from typing import Dict, Optional, Any, Tuple
import json
import os

import numpy as np

try:
    from .logging_manager import get_logger
except ImportError:
    from logging_manager import get_logger

DEFAULT_CONFIG_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "engine_config.json")

# Order of the value vector used for the material dot product
PIECE_ORDER = (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN, chess.KING)


class BaseEvaluator(ABC):
    """Abstract base class for chess position evaluators"""

    @abstractmethod
    def evaluate(self, board: chess.Board) -> float:
        """
        Evaluate a chess position.

        Args:
            board: Current chess board state

        Returns:
            Evaluation score, higher is better for the maximizing side at the root
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Get the name of this evaluator"""
        pass

    @abstractmethod
    def get_description(self) -> str:
        """Get a description of this evaluator"""
        pass


class MaterialEvaluator(BaseEvaluator):
    """
    Material-balance evaluator.

    score = -(white - black) - penalty + jitter

    where penalty = penalty_factor * (white - black) applies only while
    White holds more material, and jitter is drawn fresh on every call from
    a uniform distribution over [-evaluation_jitter, evaluation_jitter].
    Repeated evaluation of the same position therefore gives different
    scores; nothing here is cached.
    """

    def __init__(self, config_file: Optional[str] = DEFAULT_CONFIG_FILE,
                 rng: Optional[random.Random] = None, jitter: Optional[float] = None):
        """
        Initialize the material evaluator.

        Args:
            config_file: Optional path to a JSON configuration file
            rng: Random source for the jitter term (a fresh random.Random if None)
            jitter: Overrides the configured jitter amplitude
        """
        self.config = self._load_config(config_file)
        self._init_piece_values()

        self.rng = rng or random.Random()
        self.penalty_factor = self.config.get("penalty_factor", 0.1)
        self.jitter = self.config.get("evaluation_jitter", 1.0) if jitter is None else jitter

    def _load_config(self, config_file: Optional[str]) -> Dict[str, Any]:
        """Load engine configuration, falling back to built-in defaults"""
        default_config = {
            "piece_values": {
                "pawn": 100,
                "knight": 320,
                "bishop": 330,
                "rook": 500,
                "queen": 900,
                "king": 0
            },
            "penalty_factor": 0.1,
            "evaluation_jitter": 1.0,
            "search_depth": 2,
            "heuristic_opener": {
                "enabled": True,
                "center_squares": ["e5", "d5"]
            },
            "opening_book": {
                "enabled": True,
                "file_path": os.path.join(os.path.dirname(os.path.abspath(__file__)), "openings.json"),
                "async_load": True
            }
        }

        if config_file and os.path.exists(config_file):
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    user_config = json.load(f)
                if not isinstance(user_config, dict):
                    raise ValueError("top-level JSON value must be an object")
                default_config.update(user_config)
            except (OSError, ValueError) as e:
                get_logger().log_warning(f"Could not load config file {config_file}: {e}")

        return default_config

    def _init_piece_values(self):
        """Initialize the piece value vector from config"""
        values = self.config["piece_values"]
        self.piece_values = {
            chess.PAWN: values.get("pawn", 100),
            chess.KNIGHT: values.get("knight", 320),
            chess.BISHOP: values.get("bishop", 330),
            chess.ROOK: values.get("rook", 500),
            chess.QUEEN: values.get("queen", 900),
            chess.KING: values.get("king", 0)
        }
        self.value_vector = np.array([self.piece_values[pt] for pt in PIECE_ORDER], dtype=np.int64)

    def material(self, board: chess.Board) -> Tuple[int, int]:
        """Return (white_material, black_material) for the placement on the board"""
        white_counts = np.array([chess.popcount(board.pieces_mask(pt, chess.WHITE)) for pt in PIECE_ORDER])
        black_counts = np.array([chess.popcount(board.pieces_mask(pt, chess.BLACK)) for pt in PIECE_ORDER])
        return int(white_counts @ self.value_vector), int(black_counts @ self.value_vector)

    def _penalty(self, white: int, black: int) -> float:
        if black < white:
            return self.penalty_factor * (white - black)
        return 0.0

    def evaluate(self, board: chess.Board) -> float:
        """
        Evaluate the placement on the board.

        Args:
            board: Current chess board state

        Returns:
            Material score (higher is better for Black) plus fresh jitter
        """
        white, black = self.material(board)
        return -(white - black) - self._penalty(white, black) + self.rng.uniform(-self.jitter, self.jitter)

    def evaluate_with_components(self, board: chess.Board) -> dict:
        """
        Evaluate the position with a component breakdown, for logging.

        Returns:
            Dictionary with material totals, penalty, jitter and total score
        """
        white, black = self.material(board)
        penalty = self._penalty(white, black)
        jitter = self.rng.uniform(-self.jitter, self.jitter)
        return {
            'white_material': white,
            'black_material': black,
            'penalty': penalty,
            'jitter': jitter,
            'total': -(white - black) - penalty + jitter
        }

    def get_name(self) -> str:
        return "MaterialEvaluator"

    def get_description(self) -> str:
        return "Material balance with damping penalty and random tie-break jitter"


# Factory function for easy evaluator creation
def create_evaluator(evaluator_type: str = "material", **kwargs) -> BaseEvaluator:
    """
    Factory function to create evaluators.

    Args:
        evaluator_type: Type of evaluator ("material")
        **kwargs: Arguments for the evaluator

    Returns:
        Configured evaluator instance
    """
    if evaluator_type.lower() == "material":
        return MaterialEvaluator(**kwargs)
    else:
        raise ValueError(f"Unknown evaluator type: {evaluator_type}")
