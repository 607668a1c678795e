"""Command line entry point of applocker.

The first instance started for an identifier takes the lock and answers the
messages of later instances until it is interrupted or receives the ``stop``
message. Later instances send their message to the running one, print its
answer and exit.
"""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Callable

from applocker.app_locker import AppLocker
from applocker.config import get_app_locker_config
from applocker.consts import APP_NAME
from applocker.lock_outcome import LockAcquired, LockBusy, LockFailed
from applocker.logger import (
	get_log_file_path,
	logging_uncaught_exceptions,
	setup_logging,
)

log = logging.getLogger(__name__)

# message asking the running instance to release its lock and exit
STOP_MESSAGE = "stop"

# seconds between answering the stop message and stopping the server
STOP_DELAY = 0.2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""Parse command-line arguments.

	Arguments:
		lock_id (str): Identifier of the application to lock.
		--path, -p (Path | None): Directory holding the lock files. Defaults to the configured lock_dir.
		--message, -m (str): Message sent to the running instance. Defaults to "focus".
		--log_level, -L (str | None): Logging level. Defaults to the configured log_level.
		--log-file (bool): Also write logs to the applocker log file.

	Returns:
		argparse.Namespace: Parsed command-line arguments with their values.
	"""
	parser = argparse.ArgumentParser(
		prog=APP_NAME,
		description="Run a single instance for an identifier, or message the running one",
	)
	parser.add_argument("lock_id", help="Identifier of the application to lock")
	parser.add_argument(
		"--path",
		"-p",
		type=Path,
		default=None,
		help="Directory holding the lock files",
	)
	parser.add_argument(
		"--message",
		"-m",
		type=str,
		default="focus",
		help="Message sent to the running instance when the lock is busy",
	)
	parser.add_argument(
		"--log_level",
		"-L",
		type=str,
		default=None,
		help="Set the log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
	)
	parser.add_argument(
		"--log-file",
		help="Also write logs to the applocker log file",
		action="store_true",
		dest="log_file",
	)
	return parser.parse_args(argv)


def make_echo_handler(stop_event: threading.Event) -> Callable[[Any], Any]:
	"""Build the handler answering the messages of other instances.

	Args:
		stop_event: Event set when the stop message is received.

	Returns:
		A handler echoing every message back.
	"""

	def handle_message(message: Any) -> Any:
		log.info("Message received: %r", message)
		if message == STOP_MESSAGE:
			# the answer must reach the sender before the server stops
			threading.Timer(STOP_DELAY, stop_event.set).start()
		return message

	return handle_message


def install_stop_signal(stop_event: threading.Event) -> None:
	"""Set the stop event on SIGTERM, signals can only be handled by the main thread."""
	if threading.current_thread() is threading.main_thread():
		signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())


def serve_until_stopped(
	locker: AppLocker, stop_event: threading.Event, banner: str
) -> None:
	"""Hold the lock until interrupted or asked to stop, then release it.

	Args:
		locker: The AppLocker holding the lock.
		stop_event: Event ending the wait.
		banner: Line printed once the instance is ready to answer messages.
	"""
	try:
		print(banner, flush=True)
		while not stop_event.wait(0.5):
			pass
	except KeyboardInterrupt:
		log.info("Keyboard interrupt")
	finally:
		locker.unlock()


def main(argv: list[str] | None = None) -> int:
	"""Run the command line interface.

	Args:
		argv: Command line arguments, defaults to sys.argv.

	Returns:
		The process exit code: 0 when the lock was acquired or the running instance answered, 2 on failure.
	"""
	args = parse_args(argv)
	config = get_app_locker_config()
	setup_logging(
		args.log_level or config.log_level.value,
		get_log_file_path() if args.log_file else None,
	)
	sys.excepthook = logging_uncaught_exceptions
	stop_event = threading.Event()
	install_stop_signal(stop_event)
	builder = (
		AppLocker.create(args.lock_id)
		.set_config(config)
		.set_message_handler(make_echo_handler(stop_event))
		.busy(args.message)
	)
	if args.path is not None:
		builder.set_path(args.path)
	locker = builder.build()
	match locker.lock():
		case LockAcquired(port=port):
			serve_until_stopped(
				locker, stop_event, f"acquired {args.lock_id} port={port}"
			)
			return 0
		case LockBusy(reply=reply):
			print(f"busy {args.lock_id} reply={reply!r}", flush=True)
			return 0
		case LockFailed(error=error):
			print(f"failed {args.lock_id}: {error}", file=sys.stderr, flush=True)
			return 2


if __name__ == "__main__":
	sys.exit(main())
