"""Advisory lock for POSIX systems using fcntl file locking."""

import errno
import fcntl
import os
from typing import BinaryIO

from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

from .abstract_advisory_lock import AbstractAdvisoryLock

_BUSY_ERRNOS = {errno.EAGAIN, errno.EWOULDBLOCK, errno.EACCES}


class PosixAdvisoryLock(AbstractAdvisoryLock):
	"""Advisory lock based on flock.

	flock locks belong to the open file description, so two instances opening
	the same path exclude each other even within one process.

	Because the backing file is deleted on release, a competitor may lock an
	inode that no longer has a name. After flock succeeds the lock therefore
	checks that the path still names the locked inode and reports BUSY
	otherwise. The holder deletes the file before dropping flock.
	"""

	def _acquire(self, handle: BinaryIO) -> None:
		try:
			fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
		except OSError as e:
			if e.errno in _BUSY_ERRNOS:
				raise LockingError(
					LockingErrorKind.BUSY, f"Lock {self.path} is already taken"
				) from e
			raise LockingError(
				LockingErrorKind.FAILED, f"Unable to lock {self.path}: {e}"
			) from e
		if not self._names_locked_inode(handle):
			fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
			raise LockingError(
				LockingErrorKind.BUSY,
				f"Lock {self.path} was released and replaced during the attempt",
			)

	def _names_locked_inode(self, handle: BinaryIO) -> bool:
		"""Check that the lock path still refers to the opened file."""
		try:
			path_stat = os.stat(self.path)
		except FileNotFoundError:
			return False
		handle_stat = os.fstat(handle.fileno())
		return (path_stat.st_dev, path_stat.st_ino) == (
			handle_stat.st_dev,
			handle_stat.st_ino,
		)

	def _release(self, handle: BinaryIO) -> None:
		try:
			self._remove_backing_file()
		finally:
			try:
				fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
			finally:
				handle.close()
