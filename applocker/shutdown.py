"""Explicit list of callbacks to run when the interpreter exits.

Locks register their release here while they are held and unregister it when
released explicitly, so a release never runs twice.
"""

import atexit
import logging
import threading
from typing import Callable

log = logging.getLogger(__name__)


class ShutdownRegistry:
	"""Callbacks run once at interpreter exit, most recent first."""

	def __init__(self):
		self._callbacks: list[Callable[[], None]] = []
		self._lock = threading.Lock()
		self._installed = False

	def register(self, callback: Callable[[], None]) -> None:
		"""Register a callback, registering it twice has no effect.

		Args:
			callback: Function called without arguments at exit.
		"""
		with self._lock:
			if callback in self._callbacks:
				return
			self._callbacks.append(callback)
			if not self._installed:
				atexit.register(self.run)
				self._installed = True

	def unregister(self, callback: Callable[[], None]) -> bool:
		"""Remove a callback.

		Args:
			callback: A previously registered callback.

		Returns:
			True if the callback was registered, False otherwise.
		"""
		with self._lock:
			try:
				self._callbacks.remove(callback)
			except ValueError:
				return False
			return True

	def is_registered(self, callback: Callable[[], None]) -> bool:
		with self._lock:
			return callback in self._callbacks

	def run(self) -> None:
		"""Run and forget every registered callback.

		A failing callback is logged and does not prevent the others from running.
		"""
		with self._lock:
			callbacks = list(reversed(self._callbacks))
			self._callbacks.clear()
		for callback in callbacks:
			try:
				callback()
			except Exception:
				log.exception("Shutdown callback %r failed", callback)

	def __len__(self) -> int:
		with self._lock:
			return len(self._callbacks)


# process wide registry used by default
shutdown_registry = ShutdownRegistry()
