"""Advisory lock for Windows using msvcrt byte range locking."""

import errno
import logging
import msvcrt
from typing import BinaryIO

from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

from .abstract_advisory_lock import AbstractAdvisoryLock

log = logging.getLogger(__name__)

_BUSY_ERRNOS = {errno.EACCES, errno.EDEADLOCK}


class WindowsAdvisoryLock(AbstractAdvisoryLock):
	"""Advisory lock based on msvcrt.locking of the first byte of the file.

	Windows refuses to delete a file that is still open, so the backing file is
	removed after the handle is closed.
	"""

	def _acquire(self, handle: BinaryIO) -> None:
		handle.seek(0)
		try:
			msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)
		except OSError as e:
			if e.errno in _BUSY_ERRNOS:
				raise LockingError(
					LockingErrorKind.BUSY, f"Lock {self.path} is already taken"
				) from e
			raise LockingError(
				LockingErrorKind.FAILED, f"Unable to lock {self.path}: {e}"
			) from e

	def _release(self, handle: BinaryIO) -> None:
		try:
			handle.seek(0)
			msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)
		finally:
			handle.close()
		try:
			self._remove_backing_file()
		except PermissionError:
			# a competitor has the file open for its own attempt
			log.debug("Lock file %s is in use, left in place", self.path)
