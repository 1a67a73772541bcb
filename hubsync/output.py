"""Output handler implementations: console, logging, null, buffered."""

from __future__ import annotations

import logging
from datetime import datetime

from colorama import Fore, Style
from tqdm import tqdm

from hubsync.protocols import OutputHandler

SECTION_WIDTH = 50


class ConsoleOutputHandler:
    """Console output with colors, safe to interleave with progress bars."""

    def __init__(self, verbose: bool = False, timestamps: bool = True):
        """Create a console handler. Set verbose=True to enable debug output."""
        self.verbose = verbose
        self.timestamps = timestamps

    def _write(self, text: str, indent: int = 0) -> None:
        prefix = f"[{datetime.now():%H:%M:%S}] " if self.timestamps else ""
        tqdm.write(prefix + "  " * indent + text)

    def info(self, message: str, indent: int = 0) -> None:
        self._write(message, indent)

    def success(self, message: str, indent: int = 0) -> None:
        self._write(f"{Fore.GREEN}{message}{Style.RESET_ALL}", indent)

    def warning(self, message: str, indent: int = 0) -> None:
        self._write(f"{Fore.YELLOW}{message}{Style.RESET_ALL}", indent)

    def error(self, message: str, indent: int = 0) -> None:
        self._write(f"{Fore.RED}{message}{Style.RESET_ALL}", indent)

    def section(self, title: str) -> None:
        """Print a section header with a divider line."""
        tqdm.write("")
        self._write(title)
        tqdm.write("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only when verbose is enabled)."""
        if self.verbose:
            self._write(f"{Fore.CYAN}[DEBUG] {message}{Style.RESET_ALL}")


class LoggingOutputHandler:
    """Routes output through the logging module, for running without a terminal."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger('hubsync')

    def info(self, message: str, indent: int = 0) -> None:
        self.logger.info("%s%s", "  " * indent, message)

    def success(self, message: str, indent: int = 0) -> None:
        self.logger.info("%s%s", "  " * indent, message)

    def warning(self, message: str, indent: int = 0) -> None:
        self.logger.warning("%s%s", "  " * indent, message)

    def error(self, message: str, indent: int = 0) -> None:
        self.logger.error("%s%s", "  " * indent, message)

    def section(self, title: str) -> None:
        self.logger.info("%s", title)

    def debug(self, message: str) -> None:
        self.logger.debug("%s", message)


class NullOutputHandler:
    """Silent output handler for testing and JSON mode."""

    def info(self, message: str, indent: int = 0) -> None:
        pass

    def success(self, message: str, indent: int = 0) -> None:
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        pass

    def error(self, message: str, indent: int = 0) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass


class BufferedOutputHandler:
    """Collects output for deferred replay (used in parallel mode).

    Messages keep their level, so replaying into a console handler still
    colors failures red.
    """

    def __init__(self):
        """Initialize with an empty message buffer."""
        self.messages: list[tuple[str, str, int]] = []

    def info(self, message: str, indent: int = 0) -> None:
        self.messages.append(('info', message, indent))

    def success(self, message: str, indent: int = 0) -> None:
        self.messages.append(('success', message, indent))

    def warning(self, message: str, indent: int = 0) -> None:
        self.messages.append(('warning', message, indent))

    def error(self, message: str, indent: int = 0) -> None:
        self.messages.append(('error', message, indent))

    def section(self, title: str) -> None:
        self.messages.append(('section', title, 0))

    def debug(self, message: str) -> None:
        self.messages.append(('debug', message, 0))

    def flush_to(self, target: OutputHandler) -> None:
        """Replay all buffered messages on a target handler and clear the buffer."""
        for level, message, indent in self.messages:
            if level in ('section', 'debug'):
                getattr(target, level)(message)
            else:
                getattr(target, level)(message, indent=indent)
        self.messages.clear()
