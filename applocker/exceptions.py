"""Exception raised by every locking and messaging component."""

from __future__ import annotations

from applocker.enums import LockingErrorKind


class LockingError(Exception):
	"""Error raised by the locking and messaging components.

	The failure category is carried by ``kind`` instead of a subclass
	hierarchy, callers branch on it::

		try:
			lock.try_lock()
		except LockingError as e:
			if e.kind == LockingErrorKind.BUSY:
				...
	"""

	def __init__(self, kind: LockingErrorKind, message: str | None = None):
		"""Initialize the error.

		Args:
			kind: The failure category.
			message: Human readable detail, defaults to the label of the kind.
		"""
		self.kind = LockingErrorKind(kind)
		self.message = message or LockingErrorKind.get_labels()[self.kind]
		super().__init__(self.message)

	@property
	def is_busy(self) -> bool:
		"""Whether the error only signals contention."""
		return self.kind == LockingErrorKind.BUSY

	def __repr__(self) -> str:
		return f"LockingError(kind={self.kind.value!r}, message={self.message!r})"
