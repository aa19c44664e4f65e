#!/usr/bin/env python3

import math
import os
import random
import sys
import unittest

import chess

# Add the parent directory to the path to import chess_bot
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chess_bot.engine import MinimaxEngine
from chess_bot.logging_manager import ChessLoggingManager, set_logger
from chess_bot.opening_book import OpeningBook

HANGING_QUEEN = "3r2k1/8/8/8/3Q4/8/8/6K1 b - - 0 1"
MATE_IN_ONE_FOR_BLACK = "rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq - 0 2"
WHITE_CHECKMATED = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


class CheckedBoard(chess.Board):
    """Board that verifies every pop restores the exact position before the push"""

    def __init__(self, *args, **kwargs):
        self.saved_fens = []
        self.nodes_checked = 0
        super().__init__(*args, **kwargs)

    def push(self, move):
        self.saved_fens.append((self.fen(), frozenset(self.legal_moves)))
        super().push(move)

    def pop(self):
        move = super().pop()
        fen, legal_moves = self.saved_fens.pop()
        assert self.fen() == fen, f"{self.fen()} != {fen}"
        assert frozenset(self.legal_moves) == legal_moves
        self.nodes_checked += 1
        return move


def deterministic_engine(depth=2):
    """Engine with no jitter and an empty book"""
    return MinimaxEngine(depth=depth, evaluator_config={"jitter": 0.0},
                         opening_book=OpeningBook.from_dict({}))


class TestAlphaBetaSearch(unittest.TestCase):
    """Root search and alpha-beta recursion"""

    def setUp(self):
        set_logger(ChessLoggingManager(quiet=True))
        self.engine = deterministic_engine()

    def test_captures_hanging_queen(self):
        board = chess.Board(HANGING_QUEEN)
        self.assertEqual(self.engine.search(board), chess.Move.from_uci("d8d4"))
        self.assertAlmostEqual(self.engine.best_value, 500.0)

    def test_finds_mate_in_one(self):
        board = chess.Board(MATE_IN_ONE_FOR_BLACK)
        self.assertEqual(self.engine.search(board), chess.Move.from_uci("d8h4"))
        self.assertEqual(self.engine.best_value, math.inf)

    def test_no_legal_moves_returns_none(self):
        board = chess.Board(WHITE_CHECKMATED)
        self.assertIsNone(self.engine.search(board))
        self.assertIsNone(self.engine.best_value)

    def test_matches_plain_minimax(self):
        positions = [
            chess.STARTING_FEN,
            HANGING_QUEEN,
            MATE_IN_ONE_FOR_BLACK,
            "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3",
            "4k3/8/3p1p2/8/3PP3/8/8/4K3 b - - 0 1",
            "6k1/5ppp/8/8/8/8/5PPP/3R2K1 b - - 0 1",
        ]
        for fen in positions:
            for depth in (1, 2, 3):
                if depth == 3 and fen == chess.STARTING_FEN:
                    continue
                with self.subTest(fen=fen, depth=depth):
                    board = chess.Board(fen)
                    pruned = self.engine.search(board, depth)
                    pruned_nodes = self.engine.nodes_searched

                    self.engine.nodes_searched = 0
                    plain = self.engine.minimax_root(board, depth)
                    plain_nodes = self.engine.nodes_searched

                    self.assertEqual(pruned, plain)
                    self.assertLessEqual(pruned_nodes, plain_nodes)

    def test_root_values_are_exact(self):
        board = chess.Board("r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 3 3")
        self.engine.search(board)
        pruned_value = self.engine.best_value
        values = []
        for move in list(board.legal_moves):
            board.push(move)
            values.append(self.engine.minimax(board, 1, False))
            board.pop()
        self.assertAlmostEqual(pruned_value, max(values))

    def test_pruning_reduces_nodes(self):
        board = chess.Board("r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3")
        self.engine.search(board, 3)
        pruned_nodes = self.engine.nodes_searched
        self.engine.nodes_searched = 0
        self.engine.minimax_root(board, 3)
        self.assertLess(pruned_nodes, self.engine.nodes_searched)

    def test_depth_zero_is_leaf_evaluation(self):
        engine = MinimaxEngine(depth=2, opening_book=OpeningBook.from_dict({}))
        engine.evaluator.rng = random.Random(9)
        board = chess.Board()
        for _ in range(50):
            score = engine._minimax(board, 0, -math.inf, math.inf, True)
            self.assertGreaterEqual(score, -1.0)
            self.assertLessEqual(score, 1.0)
        self.assertEqual(engine.nodes_searched, 50)

    def test_first_of_equal_moves_wins(self):
        # Only kings and a blocked pawn: every root move is worth the same
        board = chess.Board("4k3/8/8/8/8/4p3/4P3/4K3 w - - 0 1")
        self.assertEqual(self.engine.search(board), next(iter(board.legal_moves)))

    def test_search_restores_position_at_every_node(self):
        for fen in (chess.STARTING_FEN, HANGING_QUEEN, MATE_IN_ONE_FOR_BLACK):
            with self.subTest(fen=fen):
                board = CheckedBoard(fen)
                before = board.fen()
                self.engine.search(board, 3 if fen != chess.STARTING_FEN else 2)
                self.assertEqual(board.fen(), before)
                self.assertEqual(board.move_stack, [])
                self.assertEqual(board.saved_fens, [])
                self.assertGreater(board.nodes_checked, 0)

    def test_exception_in_evaluation_still_restores_board(self):
        class Exploding(Exception):
            pass

        def explode(board):
            raise Exploding()

        self.engine.evaluator.evaluate = explode
        board = chess.Board()
        board.push_san("e4")
        before = board.fen()
        with self.assertRaises(Exploding):
            self.engine.search(board)
        self.assertEqual(board.fen(), before)
        self.assertEqual(len(board.move_stack), 1)

    def test_depth_below_one_rejected(self):
        board = chess.Board("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
        for depth in (0, -1):
            with self.subTest(depth=depth):
                with self.assertRaises(ValueError):
                    self.engine.search(board, depth)
                with self.assertRaises(ValueError):
                    self.engine.minimax_root(board, depth)

        self.engine.depth = 0
        with self.assertRaises(ValueError):
            self.engine.search(board)
        self.assertEqual(board.move_stack, [])

    def test_quiet_search_draws_jitter_only_at_leaves(self):
        class CountingRandom(random.Random):
            def __init__(self, seed):
                super().__init__(seed)
                self.draws = 0

            def uniform(self, a, b):
                self.draws += 1
                return super().uniform(a, b)

        engine = MinimaxEngine(depth=1, opening_book=OpeningBook.from_dict({}))
        engine.evaluator.rng = CountingRandom(5)
        board = chess.Board()
        engine.search(board)
        self.assertEqual(engine.evaluator.rng.draws, board.legal_moves.count())

    def test_moves_are_for_side_to_move(self):
        board = chess.Board()
        board.push_san("e4")
        move = self.engine.search(board)
        self.assertEqual(board.color_at(move.from_square), chess.BLACK)


if __name__ == "__main__":
    unittest.main()
