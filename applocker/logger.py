"""Logging utilities for applocker command line usage."""

import logging
from pathlib import Path
from types import TracebackType
from typing import Type

from platformdirs import user_log_path

from applocker.consts import APP_AUTHOR, APP_NAME


def get_log_file_path() -> Path:
	"""Get log file path for applocker.

	Returns:
		The path to the log file in the platform specific log directory.
	"""
	return (
		user_log_path(APP_NAME, APP_AUTHOR, ensure_exists=True)
		/ f"{APP_NAME}.log"
	)


def setup_logging(level: str, log_file: Path | None = None) -> None:
	"""Setup logging configuration for applocker.

	Configures logging to write to the console and optionally to a file as well.
	Configure the format of the log messages and the logging level.

	Args:
		level: logging level to set. 'OFF' is converted to 'NOTSET'.
		log_file: path of an additional log file, None to log to the console only.
	"""
	level = level.upper()
	if level == "OFF":
		level = "NOTSET"
	handlers: list[logging.Handler] = [logging.StreamHandler()]
	if log_file is not None:
		handlers.append(logging.FileHandler(log_file, mode='a'))
	logging.basicConfig(
		level=level,
		format='%(asctime)s - %(process)d - %(name)s - %(levelname)s - %(message)s',
		handlers=handlers,
		force=True,
	)


def set_log_level(level: str) -> None:
	"""Change global log level to new level and update all loggers accordingly.

	Args:
		level: new log level
	"""
	level = level.upper()
	cur_level = logging.getLevelName(logging.root.getEffectiveLevel())
	if cur_level == level:
		return
	logging.root.setLevel(level)
	for handler in logging.root.handlers:
		handler.setLevel(level)
	new_level = logging.getLevelName(logging.root.getEffectiveLevel())
	logging.root.debug("Log level changed from %s to %s", cur_level, new_level)


def logging_uncaught_exceptions(
	exc_type: Type[BaseException],
	exc_value: BaseException,
	exc_traceback: TracebackType,
) -> None:
	"""Log uncaught exceptions to the appropriate logger.

	Args:
		exc_type: exception type is an exception class
		exc_value: exception value is an exception instance
		exc_traceback: exception traceback is a traceback object
	"""
	if issubclass(exc_type, KeyboardInterrupt):
		logging.info("Keyboard interrupt")
		return
	logging.getLogger(exc_type.__module__).error(
		"Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback)
	)
