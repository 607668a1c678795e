"""File based advisory lock shared by every platform implementation.

A lock wraps one backing file. While the lock is held the file exists and an
exclusive OS level lock is taken on it; once released the file is deleted so
its absence always means "unlocked".
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from applocker.consts import DEFAULT_RETRY_INTERVAL
from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

log = logging.getLogger(__name__)


class AbstractAdvisoryLock(ABC):
	"""Exclusive, non-blocking lock on a backing file.

	The lock is not thread safe: one instance must be driven by one thread at
	a time. Two instances pointing to the same path exclude each other, even
	inside the same process.
	"""

	def __init__(
		self, path: Path | str, retry_interval: float = DEFAULT_RETRY_INTERVAL
	):
		"""Initialize the lock.

		Args:
			path: Path of the backing file, made absolute.
			retry_interval: Seconds slept between two busy attempts in lock_with_timeout.
		"""
		self.path = Path(path).absolute()
		self.retry_interval = retry_interval
		self._handle: BinaryIO | None = None

	def try_lock(self) -> None:
		"""Attempt to take the lock once.

		Raises:
			LockingError: BUSY if another holder owns the lock, FAILED on any other I/O error.
		"""
		if self.is_locked():
			return
		try:
			self.path.parent.mkdir(parents=True, exist_ok=True)
		except OSError as e:
			raise LockingError(
				LockingErrorKind.FAILED,
				f"Unable to create lock directory {self.path.parent}: {e}",
			) from e
		try:
			handle = open(self.path, "a+b")
		except OSError as e:
			raise LockingError(
				LockingErrorKind.FAILED,
				f"Unable to open lock file {self.path}: {e}",
			) from e
		try:
			self._acquire(handle)
		except BaseException:
			# the channel opened for this attempt must not leak
			handle.close()
			raise
		self._handle = handle
		log.debug("Lock acquired: %s", self.path)

	def lock_with_timeout(self, timeout: float) -> None:
		"""Poll try_lock until the lock is taken or the timeout elapses.

		Args:
			timeout: Maximum number of seconds to wait.

		Raises:
			LockingError: TIMEOUT when the deadline passes, FAILED on I/O errors.
		"""
		deadline = time.monotonic() + timeout
		while True:
			try:
				self.try_lock()
				return
			except LockingError as e:
				if not e.is_busy:
					raise
				if time.monotonic() >= deadline:
					raise LockingError(
						LockingErrorKind.TIMEOUT,
						f"Unable to lock {self.path} within {timeout} seconds",
					) from e
			time.sleep(self.retry_interval)

	def unlock(self) -> None:
		"""Release the lock and delete the backing file.

		Does nothing when the lock is not held.

		Raises:
			LockingError: FATAL if the lock could not be released cleanly.
		"""
		handle = self._handle
		if handle is None:
			return
		self._handle = None
		try:
			self._release(handle)
		except OSError as e:
			log.exception("Unable to release lock %s", self.path)
			raise LockingError(
				LockingErrorKind.FATAL, f"Unable to release lock {self.path}: {e}"
			) from e
		log.debug("Lock released: %s", self.path)

	def is_locked(self) -> bool:
		"""Check whether this instance currently holds the lock."""
		return self._handle is not None and not self._handle.closed

	def _remove_backing_file(self) -> None:
		"""Delete the backing file, a file already gone is not an error."""
		self.path.unlink(missing_ok=True)

	@abstractmethod
	def _acquire(self, handle: BinaryIO) -> None:
		"""Take the OS lock on an opened backing file without blocking.

		Args:
			handle: The freshly opened backing file.

		Raises:
			LockingError: BUSY on contention, FAILED otherwise.
		"""
		pass

	@abstractmethod
	def _release(self, handle: BinaryIO) -> None:
		"""Drop the OS lock, close the handle and delete the backing file.

		Args:
			handle: The backing file held by this lock.
		"""
		pass

	def __enter__(self) -> AbstractAdvisoryLock:
		self.try_lock()
		return self

	def __exit__(self, exc_type, exc_value, traceback) -> None:
		self.unlock()

	def __repr__(self) -> str:
		return f"{type(self).__name__}(path={str(self.path)!r}, locked={self.is_locked()})"
