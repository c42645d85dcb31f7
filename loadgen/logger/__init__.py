"""Logger module for loadgen

Usage:
    from loadgen.logger import session_logger as logger

    logger.info("loadgen.start", event="loadgen.start", workers=4)

    # Or implement your own
    class MyCustomLogger(Logger):
        def info(self, message: str, **kwargs):
            # Your custom implementation
            pass
"""

from .base import Logger
from .console_logger import ConsoleLogger, configure_logging

# Shared logger instance for modules that just need basic console logging
session_logger: Logger = ConsoleLogger()

__all__ = [
    "Logger",
    "ConsoleLogger",
    "configure_logging",
    "session_logger",
]
