#!/usr/bin/env python3
"""
Show what each move-selection strategy does for a FEN position.

Usage:
    python3 scripts/analyze_position.py "FEN_STRING" [options]

Options:
    --depth N          Search depth in plies (default: from engine_config.json)
    --book PATH        JSON opening book (default: bundled openings.json)
    --compare          Also run plain minimax and compare node counts
    --seed N           Seed the evaluation jitter for reproducible output

Examples:
    python3 scripts/analyze_position.py "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    python3 scripts/analyze_position.py "3r2k1/8/8/8/3Q4/8/8/6K1 b - - 0 1" --compare
"""

import argparse
import os
import random
import sys
import time

import chess

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chess_bot.engine import MinimaxEngine
from chess_bot.evaluation import MaterialEvaluator
from chess_bot.heuristics import would_blunder
from chess_bot.logging_manager import ChessLoggingManager, set_logger
from chess_bot.opening_book import OpeningBook


def analyze(fen, depth=None, book_path=None, compare=False, seed=None):
    board = chess.Board(fen)
    logger = ChessLoggingManager()
    set_logger(logger)

    book = OpeningBook(random_seed=seed)
    book.load_book(book_path or os.path.join(os.path.dirname(__file__), '..', 'chess_bot', 'openings.json'))
    engine = MinimaxEngine(depth=depth, opening_book=book)
    if seed is not None:
        engine.evaluator = MaterialEvaluator(rng=random.Random(seed))

    logger.log(str(board))
    logger.log(f"FEN: {board.fen()}")
    if board.is_game_over():
        logger.log_info(f"Game over: {board.result()}")
        return

    info = engine.get_evaluator_info()
    logger.log_info(f"Evaluator: {info['name']} ({info['description']})")
    logger.log_info(f"Static evaluation (Black's view): {engine.evaluate(board):.1f}")

    candidates = book.get_available_moves(board)
    logger.log_info(f"Book candidates: {' '.join(candidates) if candidates else 'none'}")

    blunders = [board.san(move) for move in board.legal_moves if would_blunder(board, move)]
    logger.log_info(f"Moves classified as blunders: {' '.join(blunders) if blunders else 'none'}")

    heuristic_move = engine.heuristic_opener.get_move(board) if engine.heuristic_opener else None
    logger.log_info(f"Heuristic opener: {board.san(heuristic_move) if heuristic_move else 'no move'}")

    start = time.time()
    best_move = engine.search(board)
    pruned_nodes = engine.nodes_searched
    logger.log_info(f"Alpha-beta: {board.san(best_move) if best_move else 'no move'} "
                    f"({pruned_nodes} nodes, {time.time() - start:.2f}s)")

    if compare:
        engine.nodes_searched = 0
        start = time.time()
        plain_move = engine.minimax_root(board)
        logger.log_info(f"Plain minimax: {board.san(plain_move) if plain_move else 'no move'} "
                        f"({engine.nodes_searched} nodes, {time.time() - start:.2f}s)")

    selected = engine.get_move(board)
    logger.log_success(f"Selected: {board.san(selected) if selected else 'no move'} ({engine.last_source})")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Show each move-selection strategy for a position")
    parser.add_argument("fen", help="Position in FEN")
    parser.add_argument("--depth", type=int)
    parser.add_argument("--book")
    parser.add_argument("--compare", action="store_true")
    parser.add_argument("--seed", type=int)
    args = parser.parse_args(argv)

    try:
        chess.Board(args.fen)
    except ValueError as e:
        parser.error(f"invalid FEN: {e}")

    analyze(args.fen, args.depth, args.book, args.compare, args.seed)


if __name__ == "__main__":
    main()
