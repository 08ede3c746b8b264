"""
Centralized logging configuration for the shape overlay.

Uses a rotating file handler with logs stored in a per-user logs/ directory.
Includes colored console output for debug mode.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


_VERBOSE: bool = False
# Directory holding logs/; None means the per-user default. setup_logging()
# accepts an override so tests can redirect output.
_BASE_DIR: Path | None = None
_APP_DIR_NAME = "RandomShapeOverlay"
_INSTALLED_HANDLERS: list[logging.Handler] = []

_LOG_FORMAT = '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    COLORS = {
        'DEBUG': '\033[36m',       # Cyan
        'INFO': '\033[32m',        # Green
        'WARNING': '\033[33m',     # Yellow
        'ERROR': '\033[31m',       # Red
        'CRITICAL': '\033[35m',    # Magenta
    }
    SKIP_COLOR = '\033[38;5;208m'  # Orange for skipped ticks
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname

        if '[SKIP]' in str(record.msg):
            color = self.SKIP_COLOR
        else:
            color = self.COLORS.get(record.levelname)

        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


class SuppressingStreamHandler(logging.StreamHandler):
    """Stream handler that suppresses consecutive duplicate sources.

    Repeated DEBUG/INFO lines from the same logger/level are collapsed into a
    single summary line like "[N Suppressed: CHECK LOG]" while file logs
    remain unaffected.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._last_name: str | None = None
        self._last_level: int | None = None
        self._suppress_count: int = 0
        self._last_record: logging.LogRecord | None = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno >= logging.WARNING:
                self._flush_summary()
                super().emit(record)
                self._last_name = None
                self._last_level = None
                return

            if record.name == self._last_name and record.levelno == self._last_level:
                self._suppress_count += 1
                self._last_record = record
                return

            self._flush_summary()
            super().emit(record)
            self._last_name = record.name
            self._last_level = record.levelno
        except Exception:
            self.handleError(record)

    def _flush_summary(self) -> None:
        if self._suppress_count <= 0 or self._last_record is None:
            self._suppress_count = 0
            self._last_record = None
            return

        last = self._last_record
        summary = logging.LogRecord(
            last.name,
            last.levelno,
            last.pathname,
            last.lineno,
            f"[{self._suppress_count} Suppressed: CHECK LOG]",
            args=None,
            exc_info=None,
        )
        summary.created = last.created
        summary.msecs = last.msecs
        summary.relativeCreated = last.relativeCreated
        summary.thread = last.thread
        summary.threadName = last.threadName
        super().emit(summary)

        self._suppress_count = 0
        self._last_record = None

    def close(self) -> None:
        try:
            self._flush_summary()
        finally:
            super().close()


def _default_base_dir() -> Path:
    """Per-user state directory; the install location may be read-only."""
    root = os.environ.get("LOCALAPPDATA") or os.environ.get("XDG_STATE_HOME")
    if not root:
        root = str(Path.home() / ".local" / "state")
    return Path(root) / _APP_DIR_NAME


def get_log_dir() -> Path:
    """Return the directory used for log files."""
    base = _BASE_DIR if _BASE_DIR is not None else _default_base_dir()
    return base / "logs"


def setup_logging(debug: bool = False, verbose: bool = False,
                  base_dir: Path | None = None) -> None:
    """
    Configure application logging with file rotation.

    Calling it again replaces the handlers installed by the previous call.
    If the log directory cannot be written, logging falls back to stderr.

    Args:
        debug: If True, set log level to DEBUG and enable console output.
        verbose: When True, enables per-shape and per-tick debug logs.
            Verbose mode also implies debug-level logging.
        base_dir: Optional directory under which ``logs/`` is created.
            Defaults to the per-user state directory.
    """
    global _VERBOSE, _BASE_DIR

    if base_dir is not None:
        _BASE_DIR = Path(base_dir)

    debug_enabled = debug or verbose
    level = logging.DEBUG if debug_enabled else logging.INFO

    root_logger = logging.getLogger()
    for handler in _INSTALLED_HANDLERS:
        root_logger.removeHandler(handler)
        handler.close()
    _INSTALLED_HANDLERS.clear()

    log_dir = get_log_dir()
    file_error: OSError | None = None
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        # File handler with rotation (1MB max, keep 5 backups)
        file_handler = RotatingFileHandler(
            log_dir / "overlay.log",
            maxBytes=1 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    except OSError as e:
        file_error = e
        file_handler = logging.StreamHandler(sys.stderr)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt='%H:%M:%S'))
    file_handler.setLevel(level)

    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    _INSTALLED_HANDLERS.append(file_handler)

    if debug_enabled:
        console_handler = SuppressingStreamHandler(sys.stdout)
        if sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(_LOG_FORMAT, datefmt='%H:%M:%S'))
        else:
            console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt='%H:%M:%S'))
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)
        _INSTALLED_HANDLERS.append(console_handler)

    # requests' connection pool chatter only shows up in verbose mode
    noisy_level = logging.DEBUG if verbose else logging.INFO
    for name in ("urllib3", "urllib3.connectionpool"):
        logging.getLogger(name).setLevel(noisy_level)

    _VERBOSE = bool(verbose)

    root_logger.info("=" * 60)
    root_logger.info(
        "Overlay logging initialized (debug=%s, verbose=%s)",
        debug_enabled,
        _VERBOSE,
    )
    if file_error is not None:
        root_logger.warning("Cannot write logs under %s, logging to stderr: %s", log_dir, file_error)
    root_logger.info("=" * 60)


_SHORT_NAME_OVERRIDES = {
    "engine.generation_scheduler": "engine.scheduler",
    "engine.batch_generator": "engine.generator",
    "rendering.overlay_compositor": "rendering.compositor",
}


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with optional short-name overrides for noisy modules."""
    actual = _SHORT_NAME_OVERRIDES.get(name, name)
    return logging.getLogger(actual)


def is_verbose_logging() -> bool:
    """Return True when verbose debug logging is enabled globally."""
    return _VERBOSE
