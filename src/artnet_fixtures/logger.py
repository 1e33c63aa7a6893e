"""
Central logging setup for artnet-fixtures
"""
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler

from .constants import DEFAULT_LOG_DIR


class FixtureLogger:
    """Central logger with file and console output."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(FixtureLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not FixtureLogger._initialized:
            self.console_handler = None
            self.file_handler = None
            FixtureLogger._initialized = True

    def _cleanup_old_logs(self, log_dir, max_files=10):
        """
        Clean up old log files, keeping only the most recent ones.

        Args:
            log_dir: Path to log directory
            max_files: Maximum number of log files to keep (0 = keep all)
        """
        if max_files == 0:
            return

        log_files = sorted(
            log_dir.glob('artnet_fixtures_*.log*'),
            key=lambda f: f.stat().st_mtime,
            reverse=True
        )

        for old_file in log_files[max_files:]:
            try:
                old_file.unlink()
            except OSError as e:
                logging.getLogger(__name__).warning(f"Failed to delete {old_file.name}: {e}")

    def setup_logging(self, log_dir=DEFAULT_LOG_DIR, log_level=logging.INFO,
                      console_level=logging.WARNING, max_log_files=10):
        """
        Configure the root logger.

        Args:
            log_dir: Directory for log files (None = console only)
            log_level: Level for the file handler
            console_level: Level for the console handler
            max_log_files: Maximum number of log files to keep (0 = keep all)
        """
        root_logger = logging.getLogger()
        root_logger.setLevel(min(log_level, console_level))
        root_logger.handlers.clear()

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_formatter = logging.Formatter(
            '%(levelname)-8s | %(name)s | %(message)s'
        )

        log_file = None
        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(exist_ok=True)
            self._cleanup_old_logs(log_path, max_files=max_log_files)

            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            log_file = log_path / f'artnet_fixtures_{timestamp}.log'

            # 10 MB per file, 5 backups
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(detailed_formatter)
            root_logger.addHandler(file_handler)
            self.file_handler = file_handler

        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)
        self.console_handler = console_handler

        logging.getLogger('werkzeug').setLevel(logging.WARNING)
        logging.getLogger('socketio').setLevel(logging.WARNING)
        logging.getLogger('engineio').setLevel(logging.WARNING)

        root_logger.info("=" * 80)
        root_logger.info("artnet-fixtures started")
        if log_file:
            root_logger.info(f"Log file: {log_file}")
        root_logger.info("=" * 80)


def get_logger(name):
    """
    Convenience function returning a named logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger
    """
    FixtureLogger()
    return logging.getLogger(name)


def parse_log_level(name, default=logging.WARNING):
    """Map a level name from the config ('DEBUG', 'info', ...) to a logging level."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    if not isinstance(name, str):
        return default
    return level_map.get(name.upper(), default)


def install_exception_hooks():
    """
    Log uncaught exceptions with full traceback instead of dying silently.

    Covers the main thread and worker threads (Flask, Art-Net refresh).
    """
    hook_logger = logging.getLogger('artnet_fixtures.uncaught')

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        hook_logger.critical("UNCAUGHT EXCEPTION: %s", exc_value,
                             exc_info=(exc_type, exc_value, exc_traceback))

    def handle_thread_exception(args):
        if args.exc_type is SystemExit:
            return
        thread_name = args.thread.name if args.thread else '?'
        hook_logger.critical("UNCAUGHT EXCEPTION in thread %s: %s", thread_name, args.exc_value,
                             exc_info=(args.exc_type, args.exc_value, args.exc_traceback))

    sys.excepthook = handle_exception
    threading.excepthook = handle_thread_exception
