#!/usr/bin/env python3
"""
Create a placement-keyed opening book from PGN games.

Usage:
    zstdcat lichess-games.pgn.zst | python create_opening_book_from_games.py
    python create_opening_book_from_games.py --input lichess-games.pgn.zst --output openings.json

Every position reached in the first MAX_PLIES_TO_TRACK plies of an accepted
game is keyed by its piece placement (the first FEN field), and the SAN of
the move played from it is counted. Moves played at least
MIN_GAMES_FOR_MOVE times (and not too rare relative to the most popular
reply) are written out, most popular first, as:

    {"<placement>": ["e4", "d4", ...], ...}
"""

import argparse
import io
import json
import os
import sys
import time
from collections import defaultdict, Counter
from typing import Dict, List, Optional, TextIO

import chess
import chess.pgn
import zstandard as zstd

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chess_bot.logging_manager import get_logger

# Configuration options
MIN_ELO_RATING = 1200  # Minimum rating for both players
MAX_PLIES_TO_TRACK = 12  # Number of half-moves recorded per game
MIN_GAMES_FOR_MOVE = 10  # Minimum times a move must be played from a position
MIN_MOVE_FREQUENCY_RATIO = 0.05  # Drop replies rarer than this fraction of the most common one
OUTPUT_FILE = "openings.json"
PROGRESS_INTERVAL = 100000


def should_include_game(headers: Dict[str, str], rejection_reasons: Dict[str, int],
                        min_elo: int = MIN_ELO_RATING) -> bool:
    """Check if a game meets inclusion criteria and track rejection reasons."""
    try:
        white_elo = int(headers.get('WhiteElo', '0'))
        black_elo = int(headers.get('BlackElo', '0'))
    except (ValueError, TypeError):
        rejection_reasons['ParseError'] += 1
        return False

    if white_elo < min_elo or black_elo < min_elo:
        rejection_reasons['MinElo'] += 1
        return False

    if headers.get('Variant', 'Standard') != 'Standard' or 'FEN' in headers:
        rejection_reasons['NonStandard'] += 1
        return False

    return True


def collect_game(game: chess.pgn.Game, book_counts: Dict[str, Counter],
                 max_plies: int = MAX_PLIES_TO_TRACK) -> int:
    """
    Count the moves played from each placement in the opening of a game.

    Returns:
        Number of plies recorded
    """
    board = game.board()
    plies = 0
    for move in game.mainline_moves():
        if plies >= max_plies:
            break
        book_counts[board.board_fen()][board.san(move)] += 1
        board.push(move)
        plies += 1
    return plies


def build_book(book_counts: Dict[str, Counter], min_games: int = MIN_GAMES_FOR_MOVE,
               min_ratio: float = MIN_MOVE_FREQUENCY_RATIO) -> Dict[str, List[str]]:
    """Filter the raw counts into the JSON book layout."""
    book = {}
    for placement in sorted(book_counts):
        counts = book_counts[placement]
        frequent = [(san, count) for san, count in counts.items() if count >= min_games]
        if not frequent:
            continue

        most_common_games = max(count for _, count in frequent)
        kept = [(san, count) for san, count in frequent if count >= most_common_games * min_ratio]
        kept.sort(key=lambda item: (-item[1], item[0]))
        book[placement] = [san for san, _ in kept]
    return book


def write_opening_book(book: Dict[str, List[str]], output_file: str) -> None:
    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(book, f, indent=2)
        f.write("\n")


def open_pgn_stream(path: Optional[str]) -> TextIO:
    """Open a PGN source: stdin, a plain .pgn file, or a zstd-compressed .pgn.zst file."""
    if path is None or path == "-":
        return sys.stdin
    if path.endswith(".zst"):
        reader = zstd.ZstdDecompressor().stream_reader(open(path, 'rb'))
        return io.TextIOWrapper(reader, encoding='utf-8', errors='ignore')
    return open(path, 'r', encoding='utf-8', errors='ignore')


def create_opening_book(stream: TextIO, max_plies: int = MAX_PLIES_TO_TRACK,
                        min_games: int = MIN_GAMES_FOR_MOVE, min_elo: int = MIN_ELO_RATING,
                        min_ratio: float = MIN_MOVE_FREQUENCY_RATIO) -> Dict[str, List[str]]:
    """Read every game from the stream and return the filtered book."""
    logger = get_logger()
    book_counts: Dict[str, Counter] = defaultdict(Counter)
    rejection_reasons = {'MinElo': 0, 'NonStandard': 0, 'ParseError': 0, 'Unreadable': 0}
    games_processed = 0
    games_included = 0
    start_time = time.time()

    while True:
        game = chess.pgn.read_game(stream)
        if game is None:
            break
        games_processed += 1

        if game.errors:
            rejection_reasons['Unreadable'] += 1
        elif should_include_game(game.headers, rejection_reasons, min_elo):
            collect_game(game, book_counts, max_plies)
            games_included += 1

        if games_processed % PROGRESS_INTERVAL == 0:
            elapsed = time.time() - start_time
            logger.log_info(f"{games_processed} games read, {games_included} included ({elapsed:.0f}s)")

    book = build_book(book_counts, min_games, min_ratio)
    logger.log_success(f"Processed {games_processed} games, included {games_included}, "
                       f"{len(book)} positions in book")
    rejected = ", ".join(f"{reason}: {count}" for reason, count in rejection_reasons.items() if count)
    if rejected:
        logger.log_info(f"Rejected games: {rejected}")
    return book


def main(argv=None):
    """Main function to process PGN games and create opening book."""
    parser = argparse.ArgumentParser(description="Build a JSON opening book from PGN games")
    parser.add_argument("--input", help="PGN or .pgn.zst file (default: stdin)")
    parser.add_argument("--output", default=OUTPUT_FILE, help="Where to write the JSON book")
    parser.add_argument("--max-plies", type=int, default=MAX_PLIES_TO_TRACK)
    parser.add_argument("--min-games", type=int, default=MIN_GAMES_FOR_MOVE)
    parser.add_argument("--min-elo", type=int, default=MIN_ELO_RATING)
    parser.add_argument("--min-ratio", type=float, default=MIN_MOVE_FREQUENCY_RATIO)
    args = parser.parse_args(argv)

    if args.input is None and sys.stdin.isatty():
        parser.error("no input: pipe PGN games into stdin or pass --input")

    stream = open_pgn_stream(args.input)
    try:
        book = create_opening_book(stream, args.max_plies, args.min_games, args.min_elo, args.min_ratio)
    finally:
        if stream is not sys.stdin:
            stream.close()

    write_opening_book(book, args.output)
    get_logger().log_success(f"Opening book written to {args.output}")


if __name__ == "__main__":
    main()
