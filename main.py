"""
Main entry point for the Tripane three-pane diff viewer.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading and command line overrides
- Headless region printing
- Main window creation
- Exception handling
"""

from __future__ import annotations

import argparse
import faulthandler
import logging
import os
import signal
import sys
import traceback
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, List, TextIO

from tripane import __version__
from tripane.core.diff.engine import AlignmentEngine
from tripane.core.models import BufferPair, BufferRole, Granularity, PassResult
from tripane.services.file_io import FileIOService, FileContent
from tripane.services.settings import ApplicationSettings, SettingsManager, Theme


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "Tripane"
APP_DISPLAY_NAME = "Tripane"
APP_VERSION = __version__
APP_ORGANIZATION = "Tripane"

LOGS_DIR = Path(__file__).parent / "logs"


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: Optional[str] = None
    common_path: Optional[str] = None
    right_path: Optional[str] = None
    output_path: Optional[str] = None
    granularity: Optional[Granularity] = None
    max_diffs: Optional[int] = None
    theme: Optional[Theme] = None
    print_regions: bool = False
    config_file: Optional[str] = None
    log_level: str = "WARNING"
    debug: bool = False


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Console output goes to stderr so that ``--print-regions`` output on
    stdout stays clean.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('chardet').setLevel(logging.WARNING)

    return root_logger


# =============================================================================
# Exception Handling
# =============================================================================

class ExceptionHandler:
    """
    Global exception handler for unhandled exceptions.

    Logs the exception and, once the GUI is up, shows an error dialog.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._gui = False

    def enable_dialogs(self) -> None:
        self._gui = True

    def handle_exception(
        self,
        exc_type: type,
        exc_value: BaseException,
        exc_tb
    ) -> None:
        """Handle an unhandled exception."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        self.logger.critical(
            "Unhandled exception",
            exc_info=(exc_type, exc_value, exc_tb)
        )

        if self._gui:
            tb_text = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
            self._show_error_dialog(exc_type, exc_value, tb_text)

    def _show_error_dialog(
        self,
        exc_type: type,
        exc_value: BaseException,
        traceback_text: str
    ) -> None:
        from PyQt6.QtWidgets import QApplication, QMessageBox

        if not QApplication.instance():
            return

        dialog = QMessageBox()
        dialog.setIcon(QMessageBox.Icon.Critical)
        dialog.setWindowTitle("Application Error")
        dialog.setText(f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}")
        dialog.setDetailedText(traceback_text)
        dialog.setStandardButtons(
            QMessageBox.StandardButton.Ok |
            QMessageBox.StandardButton.Close
        )
        dialog.setDefaultButton(QMessageBox.StandardButton.Ok)

        copy_btn = dialog.addButton(
            "Copy to Clipboard",
            QMessageBox.ButtonRole.ActionRole
        )

        result = dialog.exec()

        if dialog.clickedButton() == copy_btn:
            QApplication.clipboard().setText(traceback_text)

        if result == QMessageBox.StandardButton.Close:
            QApplication.quit()


# =============================================================================
# Command Line
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME.lower(),
        description="Three-pane diff viewer: compare left and right texts against a common one",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s left.txt common.txt right.txt                 Open the viewer
  %(prog)s left.txt common.txt right.txt --print-regions Print regions and exit
  %(prog)s a b c --granularity specific --max-diffs 100  Finer regions, lower limit
        """
    )

    parser.add_argument('left', help='Left file')
    parser.add_argument('common', help='Common (editable) file')
    parser.add_argument('right', help='Right file')

    parser.add_argument(
        '-o', '--output',
        help='File to save the common pane to (defaults to the common file)'
    )

    # Diff options
    parser.add_argument(
        '--granularity',
        choices=['specific', 'broad'],
        default=None,
        help='Merge adjacent regions (broad) or only overlapping ones (specific)'
    )
    parser.add_argument(
        '--max-diffs',
        type=int,
        default=None,
        help='Do not display passes with more regions than this'
    )
    parser.add_argument(
        '--print-regions',
        action='store_true',
        help='Print the diff regions and exit without opening a window'
    )

    # Display options
    parser.add_argument(
        '--theme',
        choices=['system', 'light', 'dark'],
        default=None,
        help='Application theme'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )

    # Logging
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging to a file'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    if parsed.max_diffs is not None and parsed.max_diffs < 0:
        parser.error("--max-diffs must not be negative")

    result = CommandLineArgs()
    result.left_path = parsed.left
    result.common_path = parsed.common
    result.right_path = parsed.right
    result.output_path = parsed.output
    result.max_diffs = parsed.max_diffs
    result.print_regions = parsed.print_regions
    result.config_file = parsed.config
    result.debug = parsed.debug

    if parsed.granularity:
        result.granularity = Granularity.from_string(parsed.granularity)

    if parsed.theme:
        result.theme = Theme.from_string(parsed.theme)

    result.log_level = 'DEBUG' if parsed.debug else parsed.log_level

    return result


def load_settings(args: CommandLineArgs) -> SettingsManager:
    """
    Load settings and apply command line overrides.

    Overrides are kept in memory only; they are not written back.
    """
    manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    settings = manager.settings

    if args.granularity is not None:
        settings.diff.granularity = args.granularity
    if args.max_diffs is not None:
        settings.diff.max_diffs = args.max_diffs
    if args.theme is not None:
        settings.ui.theme = args.theme

    return manager


def read_inputs(
    args: CommandLineArgs,
    file_io: FileIOService,
    logger: logging.Logger
) -> Optional[dict[BufferRole, FileContent]]:
    """Read the three input files, logging any that cannot be read."""
    paths = {
        BufferRole.LEFT: args.left_path,
        BufferRole.COMMON: args.common_path,
        BufferRole.RIGHT: args.right_path,
    }
    contents = {}
    for role, path in paths.items():
        result = file_io.read_text(path)
        if not result.success:
            logger.error(f"Cannot read {role.value} file: {result.error}")
            return None
        contents[role] = result.content
    return contents


# =============================================================================
# Headless Output
# =============================================================================

def format_regions(result: PassResult) -> list[str]:
    """Format the regions of a pass, one line per region."""
    lines = []
    for pair in BufferPair:
        regions = result.regions(pair)
        first, second = pair.first.value, pair.second.value
        lines.append(f"{first}/{second}: {len(regions)} region(s)")
        for region in regions:
            lines.append(
                f"  {first} [{region.left_start_line}, {region.left_end_line})"
                f"  {second} [{region.right_start_line}, {region.right_end_line})"
            )
    return lines


def print_regions(
    contents: dict[BufferRole, FileContent],
    settings: ApplicationSettings,
    out: Optional[TextIO] = None
) -> int:
    """
    Run one pass over the inputs and print its regions.

    Returns:
        Exit code: 0 when printed, 2 when the pass exceeded the max-diffs limit
    """
    out = out or sys.stdout
    engine = AlignmentEngine(options=settings.diff.engine_options())
    result = engine.compute(
        contents[BufferRole.LEFT].content,
        contents[BufferRole.COMMON].content,
        contents[BufferRole.RIGHT].content,
    )

    if engine.exceeds_ceiling(result):
        print(
            f"Too many differences to display: {result.total} "
            f"(limit {engine.options.max_diffs})",
            file=out
        )
        return 2

    for line in format_regions(result):
        print(line, file=out)
    return 0


# =============================================================================
# GUI
# =============================================================================

def setup_application():
    """Create and configure the QApplication."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication(sys.argv)

    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_DISPLAY_NAME)
    app.setApplicationVersion(APP_VERSION)
    app.setOrganizationName(APP_ORGANIZATION)

    app.setQuitOnLastWindowClosed(True)

    return app


def setup_signal_handlers():
    """
    Set up Unix signal handlers.

    Returns the timer that lets Python handle signals while Qt's event
    loop runs; the caller must keep it alive.
    """
    from PyQt6.QtCore import QTimer

    if sys.platform == 'win32':
        return None

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    timer = QTimer()
    timer.timeout.connect(lambda: None)
    timer.start(500)
    return timer


def _signal_handler(signum, frame) -> None:
    from PyQt6.QtWidgets import QApplication

    logging.info(f"Received signal {signum}, shutting down...")
    QApplication.quit()


def run_gui(
    args: CommandLineArgs,
    manager: SettingsManager,
    contents: dict[BufferRole, FileContent],
    file_io: FileIOService,
    exception_handler: ExceptionHandler,
    logger: logging.Logger
) -> int:
    """Open the main window and run the event loop."""
    app = setup_application()
    exception_handler.enable_dialogs()
    signal_timer = setup_signal_handlers()

    from tripane.ui.merge_view import MergeWindow

    window = MergeWindow(
        manager,
        file_io=file_io,
        output_path=args.output_path or args.common_path,
    )
    window.set_common_format(contents[BufferRole.COMMON])
    window.set_contents(
        contents[BufferRole.LEFT].content,
        contents[BufferRole.COMMON].content,
        contents[BufferRole.RIGHT].content,
    )
    window.show()

    logger.info("Application started successfully")
    exit_code = app.exec()

    if signal_timer is not None:
        signal_timer.stop()

    logger.info(f"Application exiting with code {exit_code}")
    return exit_code


# =============================================================================
# Main Function
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 for success)
    """
    # Redirect stdout/stderr if None (common in frozen apps)
    if sys.stdout is None:
        sys.stdout = open(os.devnull, 'w')
    if sys.stderr is None:
        sys.stderr = open(os.devnull, 'w')

    faulthandler.enable()

    args = parse_arguments(argv)

    log_file = LOGS_DIR / f"{APP_NAME}_{datetime.now():%Y%m%d}.log" if args.debug else None
    logger = setup_logging(args.log_level, log_file)
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    exception_handler = ExceptionHandler(logger)
    sys.excepthook = exception_handler.handle_exception

    manager = load_settings(args)
    file_io = FileIOService()

    contents = read_inputs(args, file_io, logger)
    if contents is None:
        return 1

    if args.print_regions:
        return print_regions(contents, manager.settings)

    return run_gui(args, manager, contents, file_io, exception_handler, logger)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
