#!/usr/bin/env python3
"""
Unified logging manager for the move selector.
Provides consistent logging for the engine, the UCI front end and scripts.

IMPORTANT: NEVER use print() statements in the engine code when running under UCI.
All logging must go through this logging manager to avoid polluting the UCI protocol.
A GUI expects clean UCI communication and any unexpected output will cause warnings.
"""

import logging


class ChessLoggingManager:
    """Unified logging manager for move selection operations"""

    def __init__(self, log_callback=None, quiet=False, use_python_logging=False):
        """
        Initialize logging manager.

        Args:
            log_callback: Function to call for logging (default: print)
            quiet: If True, suppress all logging
            use_python_logging: If True, use Python logging instead of callback
        """
        self.log_callback = log_callback or print
        self.quiet = quiet
        self.use_python_logging = use_python_logging

        if self.use_python_logging:
            self.logger = logging.getLogger(__name__)

    def log(self, message):
        """Log a message if not quiet"""
        if not self.quiet:
            if self.use_python_logging:
                self.logger.info(message)
            elif self.log_callback:
                self.log_callback(message)

    def log_book_loaded(self, stats):
        """Log opening book load statistics"""
        if not self.quiet:
            message = f"📘 Opening book loaded: {stats['total_positions']} positions, {stats['total_moves']} moves"
            if stats.get('skipped_entries'):
                message += f" ({stats['skipped_entries']} malformed entries skipped)"
            self.log(message)

    def log_book_move(self, board, candidates, move):
        """Log a move chosen from the opening book"""
        if not self.quiet:
            try:
                move_san = board.san(move)
            except Exception:
                move_san = move.uci()
            self.log(f"📘 Opening book hit. Found moves: {' '.join(candidates)}. Playing move: {move_san}")

    def log_heuristic_move(self, board, move):
        """Log a move chosen by the heuristic opener"""
        if not self.quiet:
            try:
                move_san = board.san(move)
            except Exception:
                move_san = move.uci()
            self.log(f"🧠 Heuristic move selected: {move_san}")

    def log_search_start(self, board, search_depth):
        """Log the start of a search"""
        if not self.quiet:
            self.log(f"🤔 Engine thinking (depth {search_depth})...")
            self.log(f"🎭 Current side to move: {'White' if board.turn else 'Black'}")

    def log_search_completion(self, search_time, nodes_searched):
        """Log search completion statistics"""
        if not self.quiet:
            nodes_per_second = nodes_searched / search_time if search_time > 0 else 0
            self.log(f"⏱️ Search completed in {search_time:.2f}s ({nodes_searched} nodes)")
            self.log(f"🚀 Speed: {nodes_per_second:.0f} nodes/s")

    def log_new_best_move(self, move_san, evaluation):
        """Log a new best move found at the root"""
        if not self.quiet:
            self.log(f"🔄 New best move: {move_san} ({evaluation:.1f})")

    def log_best_move(self, board, best_move, best_value, eval_components=None):
        """Log the final best move with its evaluation"""
        if not self.quiet:
            try:
                move_san = board.san(best_move)
                self.log(f"🤖 Best: {move_san} ({best_value:.1f})")

                if eval_components:
                    self.log(
                        f"📊 Root material: White {eval_components['white_material']}, "
                        f"Black {eval_components['black_material']}, "
                        f"penalty {eval_components['penalty']:.1f}"
                    )
            except Exception as e:
                self.log(f"🤖 Best: {best_move.uci()} (SAN error: {e})")

    def log_move_sent(self, move_san, source):
        """Log the move that was sent and which strategy produced it"""
        if not self.quiet:
            self.log(f"🎯 Move sent: {move_san} ({source})")

    def log_error(self, error_message):
        """Log an error message"""
        if not self.quiet:
            self.log(f"❌ Error: {error_message}")

    def log_info(self, info_message):
        """Log an info message"""
        if not self.quiet:
            self.log(f"ℹ️  {info_message}")

    def log_success(self, success_message):
        """Log a success message"""
        if not self.quiet:
            self.log(f"✅ {success_message}")

    def log_warning(self, warning_message):
        """Log a warning message"""
        if not self.quiet:
            self.log(f"⚠️  {warning_message}")

    def log_top_moves(self, board, move_evaluations, max_moves=5):
        """Log the top root moves with their evaluations"""
        if not self.quiet and move_evaluations:
            ranked = sorted(move_evaluations, key=lambda item: item[1], reverse=True)[:max_moves]
            move_strings = []
            for move, evaluation in ranked:
                try:
                    move_strings.append(f"{board.san(move)} ({evaluation:.1f})")
                except Exception:
                    move_strings.append(f"{move.uci()} ({evaluation:.1f})")
            self.log(f"Top moves: {'  '.join(move_strings)}")

# Global logging manager instance
_global_logger = None

def get_logger(log_callback=None, quiet=False, use_python_logging=False):
    """Get the global logging manager instance"""
    global _global_logger
    if _global_logger is None:
        _global_logger = ChessLoggingManager(log_callback, quiet, use_python_logging)
    return _global_logger

def set_logger(logger):
    """Set the global logging manager instance"""
    global _global_logger
    _global_logger = logger
