import math
import os
import time
import chess
try:
    from .evaluation import create_evaluator
    from .heuristics import HeuristicOpener
    from .logging_manager import get_logger
    from .opening_book import OpeningBook
except ImportError:
    from evaluation import create_evaluator
    from heuristics import HeuristicOpener
    from logging_manager import get_logger
    from opening_book import OpeningBook

# IMPORTANT: All logging must use self.logger methods, never print() statements.
# This ensures clean UCI protocol communication.

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class Engine:
    """Base class for chess engines"""
    def get_move(self, board):
        raise NotImplementedError


class MinimaxEngine(Engine):
    """
    Computer move selection: opening book, then a heuristic opener, then
    minimax search with alpha-beta pruning.

    The root of the search is always the maximizing side and the evaluator
    scores from Black's perspective, so the reference configuration has the
    computer playing Black.

    The board passed in is only mutated transiently inside the search;
    every push is popped before the call returns, including on cutoffs.
    """

    def __init__(self, depth=None, evaluator_type="material", evaluator_config=None,
                 opening_book=None, heuristic_opener=None, quiet=False,
                 log_callback=None, use_python_logging=False):
        self.nodes_searched = 0
        self.quiet = quiet

        # Initialize logging manager
        self.logger = get_logger(log_callback, quiet, use_python_logging)

        self.evaluator = create_evaluator(evaluator_type, **(evaluator_config or {}))
        self.config = self.evaluator.config

        # Set search depth from config file if not explicitly provided
        if depth is None:
            self.depth = self.config.get("search_depth", 2)
        else:
            self.depth = depth
        if self.depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {self.depth}")

        heuristic_config = self.config.get("heuristic_opener", {})
        if heuristic_opener is None and heuristic_config.get("enabled", True):
            heuristic_opener = HeuristicOpener(heuristic_config.get("center_squares", ["e5", "d5"]))
        self.heuristic_opener = heuristic_opener

        self.opening_book = opening_book
        if self.opening_book is None:
            self.init_opening_book()

        # Search result attributes
        self.best_value = None
        self.last_source = None

    def init_opening_book(self):
        """Create the opening book from config and start loading it"""
        opening_book_config = self.config.get("opening_book", {})

        if not opening_book_config.get("enabled", False):
            if not self.quiet:
                self.logger.log_info("Opening book disabled in configuration")
            return

        book_file_path = opening_book_config.get("file_path", "openings.json")
        if not os.path.isabs(book_file_path):
            book_file_path = os.path.join(PACKAGE_DIR, book_file_path)

        self.opening_book = OpeningBook()
        if opening_book_config.get("async_load", True):
            self.opening_book.load_book_async(book_file_path)
        else:
            self.opening_book.load_book(book_file_path)

    def get_move(self, board, disable_opening_book=False):
        """
        Choose the computer's move for the side to move.

        Strategies are tried in a fixed order and the first one that
        produces a move wins: opening book, heuristic opener, search.

        Args:
            board: Current chess board state (restored before returning)
            disable_opening_book: Skip the book lookup for this call

        Returns:
            A legal move, or None if the game is already over
        """
        self.last_source = None

        if board.is_game_over():
            self.logger.log_info(f"Game over ({board.result()}), no move to select")
            return None

        if self.opening_book is not None and not disable_opening_book:
            book_move = self.opening_book.get_move(board)
            if book_move is not None:
                self.logger.log_book_move(board, self.opening_book.get_available_moves(board), book_move)
                self.last_source = "book"
                return book_move

        if self.heuristic_opener is not None:
            heuristic_move = self.heuristic_opener.get_move(board)
            if heuristic_move is not None:
                self.logger.log_heuristic_move(board, heuristic_move)
                self.last_source = "heuristic"
                return heuristic_move

        best_move = self.search(board)
        if best_move is not None:
            self.last_source = "search"
        return best_move

    def search(self, board, depth=None):
        """
        Root of the minimax search.

        Every root move is searched with a full (-inf, +inf) window so its
        value is exact; the first move with the strictly highest value wins.

        Args:
            board: Current board state (restored before returning)
            depth: Plies to search, defaults to the configured depth

        Returns:
            Best move found, or None when there are no legal moves
        """
        if depth is None:
            depth = self.depth
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")

        self.nodes_searched = 0
        self.best_value = None
        start_time = time.time()
        self.logger.log_search_start(board, depth)

        best_move = None
        best_value = -math.inf
        move_evaluations = []

        for move in list(board.legal_moves):
            board.push(move)
            try:
                value = self._minimax(board, depth - 1, -math.inf, math.inf, False)
            finally:
                board.pop()
            move_evaluations.append((move, value))

            if best_move is None or value > best_value:
                best_value = value
                best_move = move
                # SAN and the component breakdown are only computed for a live logger
                if not self.logger.quiet:
                    self.logger.log_new_best_move(board.san(move), value)

        self.logger.log_search_completion(time.time() - start_time, self.nodes_searched)

        if best_move is not None:
            self.best_value = best_value
            if not self.logger.quiet:
                self.logger.log_top_moves(board, move_evaluations)
                self.logger.log_best_move(board, best_move, best_value,
                                          self.evaluator.evaluate_with_components(board))

        return best_move

    def _minimax(self, board, depth, alpha, beta, maximizing):
        """
        Minimax search with alpha-beta pruning.

        Args:
            board: Current board state
            depth: Remaining search depth
            alpha: Best score the maximizing side is assured of
            beta: Best score the minimizing side is assured of
            maximizing: Whether the side to move at this node maximizes

        Returns:
            Value of the node. A node with no legal moves keeps its initial
            bound (-inf when maximizing, +inf when minimizing).
        """
        self.nodes_searched += 1

        # Leaf node: evaluate position
        if depth == 0:
            return self.evaluator.evaluate(board)

        if maximizing:
            max_eval = -math.inf
            for move in list(board.legal_moves):
                board.push(move)
                try:
                    value = self._minimax(board, depth - 1, alpha, beta, False)
                finally:
                    board.pop()
                max_eval = max(max_eval, value)
                alpha = max(alpha, value)
                if beta <= alpha:
                    break
            return max_eval
        else:
            min_eval = math.inf
            for move in list(board.legal_moves):
                board.push(move)
                try:
                    value = self._minimax(board, depth - 1, alpha, beta, True)
                finally:
                    board.pop()
                min_eval = min(min_eval, value)
                beta = min(beta, value)
                if beta <= alpha:
                    break
            return min_eval

    def minimax(self, board, depth, maximizing):
        """Plain minimax without pruning. Same leaf scoring as the search."""
        self.nodes_searched += 1

        if depth == 0:
            return self.evaluator.evaluate(board)

        values = []
        for move in list(board.legal_moves):
            board.push(move)
            try:
                values.append(self.minimax(board, depth - 1, not maximizing))
            finally:
                board.pop()

        if maximizing:
            return max(values, default=-math.inf)
        return min(values, default=math.inf)

    def minimax_root(self, board, depth=None):
        """Root move chosen by plain minimax, with the same tie-break as search()."""
        if depth is None:
            depth = self.depth
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")

        best_move = None
        best_value = -math.inf
        for move in list(board.legal_moves):
            board.push(move)
            try:
                value = self.minimax(board, depth - 1, False)
            finally:
                board.pop()
            if best_move is None or value > best_value:
                best_value = value
                best_move = move
        return best_move

    def evaluate(self, board):
        """
        Evaluate the current board position with the configured evaluator.

        Returns:
            Evaluation score (higher is better for Black), with fresh jitter
        """
        return self.evaluator.evaluate(board)

    def get_evaluator_info(self):
        """Get information about the current evaluator"""
        return {
            'name': self.evaluator.get_name(),
            'description': self.evaluator.get_description()
        }
