"""
Logging Utilities

Purpose: Module loggers for the package and one-time console setup.

Design notes:
- Library code only asks for loggers; main.py decides where records go
- Console output goes through rich's RichHandler
"""

import logging

from rich.logging import RichHandler

__all__ = ["get_logger", "configure_logging"]

LOG_FORMAT = "%(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
	"""
	Configure root logging once.

	Args:
		level: Logging level name (e.g. "INFO", "DEBUG")
	"""
	root = logging.getLogger()
	root.setLevel(level.upper())

	# Calling twice must not duplicate handlers
	if any(isinstance(h, RichHandler) for h in root.handlers):
		return

	handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True)
	handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
	root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
	"""Get a module logger."""
	return logging.getLogger(name)
