#!/usr/bin/env python3
"""
UCI-compatible front end for the move selector, with file logging.
"""

import argparse
import sys
import chess
from datetime import datetime
from chess_bot.engine import MinimaxEngine
from chess_bot.logging_manager import ChessLoggingManager, set_logger
from chess_bot.opening_book import OpeningBook

class LoggingEngine(MinimaxEngine):
    """Engine with logging capabilities using unified logging manager"""

    def __init__(self, depth=None, log_callback=None, opening_book=None):
        super().__init__(depth=depth, opening_book=opening_book, log_callback=log_callback)
        # Override the logger to use our own, never stdout
        self.logger = ChessLoggingManager(log_callback, quiet=False)

class UCIEngine:
    """UCI-compatible wrapper for the chess engine"""

    def __init__(self, depth=None, book_path=None, use_book=True, log_file="UCI-LOG.txt", output=None):
        self.board = chess.Board()
        self.log_file = log_file
        self.output = output or sys.stdout
        self.move_number = 0
        self.use_book = use_book

        # Route every component's logging to the log file before anything loads
        set_logger(ChessLoggingManager(self.log, quiet=False))

        opening_book = None
        if book_path:
            opening_book = OpeningBook()
            opening_book.load_book_async(book_path)

        self.engine = LoggingEngine(depth=depth, log_callback=self.log,
                                    opening_book=opening_book)
        self.depth_limit = self.engine.depth

    def log(self, message: str):
        """Log message to file with timestamp"""
        if not self.log_file:
            return
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(f"[{timestamp}] {message}\n")
        except OSError:
            # A broken log file must not take the engine down
            pass

    def send(self, line: str):
        print(line, file=self.output, flush=True)

    def run(self, stream=None):
        """Main UCI loop"""
        stream = stream or sys.stdin
        for raw_line in stream:
            line = raw_line.strip()
            if not line:
                continue
            if line == "quit":
                break
            try:
                self.handle(line)
            except Exception as e:
                self.engine.logger.log_error(f"{type(e).__name__} while handling '{line}': {e}")
                self.send(f"info string Error: {e}")

    def handle(self, line: str):
        if line == "uci":
            self.send("id name ChessBot")
            self.send("id author Chess Engine Team")
            self.send("option name Depth type spin default 2 min 1 max 6")
            self.send(f"option name OwnBook type check default {'true' if self.use_book else 'false'}")
            self.send("uciok")
        elif line == "isready":
            self.send("readyok")
        elif line.startswith("setoption"):
            self._handle_setoption(line)
        elif line == "ucinewgame":
            self.board = chess.Board()
            self.move_number = 0
        elif line.startswith("position"):
            self._handle_position(line)
        elif line.startswith("go"):
            self._handle_go(line)

    def _handle_setoption(self, line: str):
        """Handle setoption command"""
        parts = line.split()
        if len(parts) >= 4 and parts[1] == "name" and parts[3] == "value":
            option_name = parts[2]
            value = parts[4] if len(parts) > 4 else ""

            if option_name == "Depth":
                try:
                    depth = int(value)
                except ValueError:
                    self.engine.logger.log_warning(f"Ignoring invalid Depth value: {value}")
                    return
                if depth >= 1:
                    self.depth_limit = depth
                    self.engine.depth = depth
            elif option_name == "OwnBook":
                self.use_book = value.lower() == "true"

    def _handle_position(self, line: str):
        """Handle position command"""
        parts = line.split()
        if len(parts) < 2:
            return

        if "moves" in parts:
            moves_index = parts.index("moves")
            setup, moves = parts[1:moves_index], parts[moves_index + 1:]
        else:
            setup, moves = parts[1:], []

        if setup and setup[0] == "startpos":
            board = chess.Board()
        elif setup and setup[0] == "fen" and len(setup) > 1:
            board = chess.Board(" ".join(setup[1:]))
        else:
            self.engine.logger.log_warning(f"Unrecognised position command: {line}")
            return

        for move_str in moves:
            move = chess.Move.from_uci(move_str)
            if move not in board.legal_moves:
                self.engine.logger.log_warning(f"Illegal move {move_str} in position command, stopping there")
                break
            board.push(move)

        self.board = board

    def _handle_go(self, line: str):
        """Handle go command and find best move"""
        parts = line.split()
        depth = self.depth_limit
        if "depth" in parts:
            index = parts.index("depth")
            if index + 1 < len(parts):
                depth = max(1, int(parts[index + 1]))
        self.engine.depth = depth

        self.move_number += 1
        self.log(f"=== MOVE {self.move_number} ===")
        self.log(f"Side to move: {'White' if self.board.turn else 'Black'}")
        self.log(f"Search depth: {depth}")
        self.log(f"Board FEN: {self.board.fen()}")

        best_move = self.engine.get_move(self.board, disable_opening_book=not self.use_book)

        if best_move and best_move in self.board.legal_moves:
            move_san = self.board.san(best_move)
            self.engine.logger.log_move_sent(move_san, self.engine.last_source)
            self.send(f"info string Playing move: {move_san} ({self.engine.last_source})")
            self.send(f"bestmove {best_move.uci()}")
        else:
            if best_move:
                self.engine.logger.log_error(f"Illegal move {best_move.uci()} generated")
            else:
                self.engine.logger.log_info("No move available, game is over")
            self.send("bestmove 0000")

def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(description="UCI front end for the chess move selector")
    parser.add_argument("--depth", type=int, help="Search depth in plies (default: from engine_config.json)")
    parser.add_argument("--book", help="Path to a JSON opening book (default: bundled openings.json)")
    parser.add_argument("--no-book", action="store_true", help="Disable the opening book")
    parser.add_argument("--log-file", default="UCI-LOG.txt", help="Where engine logs are written")
    args = parser.parse_args(argv)

    engine = UCIEngine(depth=args.depth, book_path=args.book, use_book=not args.no_book,
                       log_file=args.log_file)
    engine.run()

if __name__ == "__main__":
    main()
