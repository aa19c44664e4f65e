"""
Opening book keyed by piece placement.

Format (JSON object):
{
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR": ["e4", "d4", "Nf3", "c4"],
    "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR": ["e5", "c5", "e6", "c6"]
}

Keys are the placement field of a FEN only. Side to move, castling rights,
en-passant square and move counters are ignored, so every move order that
reaches the same placement shares one entry. Values are candidate moves in
SAN.

The book will:
1. Load once (synchronously or on a background thread) and never change afterwards
2. Skip malformed entries instead of failing the whole load
3. Report "no move" for every lookup until loading has finished
4. Select uniformly at random among the candidates that are legal in the actual position
"""

import chess
import json
import random
import threading
import time
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Any

try:
    from .logging_manager import get_logger
except ImportError:
    from logging_manager import get_logger


class OpeningBookError(Exception):
    """Exception raised for opening book format errors"""
    pass


_EMPTY_BOOK: Mapping[str, Tuple[str, ...]] = MappingProxyType({})


def position_key(board: chess.Board) -> str:
    """Placement-only key used to index the opening book."""
    return board.board_fen()


class OpeningBook:
    """
    Read-only opening book with an explicit readiness flag.

    The mapping is published in a single attribute assignment once loading
    has finished, so readers on the selecting thread either see the empty
    book or the complete one.
    """

    def __init__(self, book_file_path: Optional[str] = None, random_seed: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        self.book_data: Mapping[str, Tuple[str, ...]] = _EMPTY_BOOK
        self.skipped_entries = 0
        self._ready = False
        self._load_thread: Optional[threading.Thread] = None
        self.logger = get_logger()

        if rng is None:
            # Seed from the clock when no seed is given
            if random_seed is None:
                random_seed = int(time.time() * 1000000)
            rng = random.Random(random_seed)
        self.rng = rng

        if book_file_path:
            self.load_book(book_file_path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs) -> "OpeningBook":
        """Build a ready book from an in-memory mapping (same rules as a file load)."""
        book = cls(**kwargs)
        book._publish(*book._parse_entries(data))
        return book

    def load_book(self, file_path: str, strict: bool = False) -> None:
        """
        Load opening book from a JSON file.

        Missing or unreadable files degrade to an empty book. The book is
        marked ready either way so callers stop waiting for it.

        Args:
            file_path: Path to the opening book file
            strict: Raise OpeningBookError instead of degrading

        Raises:
            OpeningBookError: Only when strict is True and the file is unusable
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise OpeningBookError(f"Opening book must be a JSON object, got {type(data).__name__}")
        except FileNotFoundError:
            error = OpeningBookError(f"Opening book file not found: {file_path}")
        except (OSError, ValueError) as e:
            error = OpeningBookError(f"Error reading opening book file {file_path}: {e}")
        except OpeningBookError as e:
            error = e
        else:
            self._publish(*self._parse_entries(data))
            self.logger.log_book_loaded(self.get_book_stats())
            return

        if strict:
            raise error
        self.logger.log_warning(f"{error}; continuing with an empty book")
        self._publish({}, 0)

    def load_book_async(self, file_path: str) -> threading.Thread:
        """
        Start loading the book on a daemon thread and return immediately.

        Completion is observable only through is_ready().
        """
        thread = threading.Thread(target=self.load_book, args=(file_path,),
                                  name="opening-book-loader", daemon=True)
        self._load_thread = thread
        thread.start()
        return thread

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until an asynchronous load finishes. Meant for scripts and tests."""
        if self._load_thread is not None:
            self._load_thread.join(timeout)
        return self._ready

    def _parse_entries(self, data: Dict[Any, Any]) -> Tuple[Dict[str, Tuple[str, ...]], int]:
        """
        Keep well-formed entries, count the rest.

        Keys written as a full FEN are reduced to their placement field;
        entries that collapse onto the same placement are merged in order.
        """
        entries = {}
        skipped = 0
        for key, moves in data.items():
            if not isinstance(key, str) or not isinstance(moves, list):
                skipped += 1
                continue
            candidates = tuple(move.strip() for move in moves if isinstance(move, str) and move.strip())
            placement = key.strip().split(' ')[0]
            if not placement or not candidates:
                skipped += 1
                continue
            if placement in entries:
                candidates = entries[placement] + tuple(san for san in candidates
                                                        if san not in entries[placement])
            entries[placement] = candidates
        return entries, skipped

    def _publish(self, entries: Dict[str, Tuple[str, ...]], skipped: int) -> None:
        self.skipped_entries = skipped
        self.book_data = MappingProxyType(entries)
        self._ready = True

    def is_ready(self) -> bool:
        return self._ready

    def __len__(self) -> int:
        return len(self.book_data)

    def is_in_book(self, board: chess.Board) -> bool:
        """
        Check if the current placement is in the opening book.

        Args:
            board: Current board state

        Returns:
            True if position is in book, False otherwise (always False before loading finishes)
        """
        return position_key(board) in self.book_data

    def get_available_moves(self, board: chess.Board) -> List[str]:
        """
        Get the SAN candidates stored for the current placement.

        Args:
            board: Current board state

        Returns:
            Candidate moves in book order, empty if the placement is absent
        """
        return list(self.book_data.get(position_key(board), ()))

    def get_move(self, board: chess.Board) -> Optional[chess.Move]:
        """
        Pick a book move for the current position.

        Candidates that are not legal here (the key ignores side to move and
        rights) are dropped before the random choice.

        Args:
            board: Current board state

        Returns:
            Chess move if found in book, None otherwise
        """
        candidates = self.get_available_moves(board)
        if not candidates:
            return None

        legal_moves = []
        for san in candidates:
            try:
                legal_moves.append(board.parse_san(san))
            except ValueError:
                continue

        if not legal_moves:
            self.logger.log_warning(f"No legal book move among {candidates} for {board.fen()}")
            return None

        return self.rng.choice(legal_moves)

    def get_book_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the loaded opening book.

        Returns:
            Dictionary with book statistics
        """
        return {
            'ready': self._ready,
            'total_positions': len(self.book_data),
            'total_moves': sum(len(moves) for moves in self.book_data.values()),
            'skipped_entries': self.skipped_entries
        }
