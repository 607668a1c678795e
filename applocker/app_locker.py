"""Single instance locking with a messaging channel to the lock holder.

An AppLocker binds three primitives:

- a named advisory lock, whose holder *is* the running instance;
- a global advisory lock, shared by every identifier, held only while the
  named lock is taken and the holder's port is published (or withdrawn);
- a message server whose port is published in a port record, so that losing
  instances can talk to the holder.

Because the port record is only written and deleted under the global lock, a
process that fails to take the named lock either finds a live port or no port
at all, never a port whose server already exited.

You don't need to call unlock() explicitly: the lock is released at
interpreter exit. Call it any time your application logic requires it.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from applocker.advisory_lock import AdvisoryLock
from applocker.config import AppLockerConfig
from applocker.consts import GLOBAL_LOCK_ID, LOCK_FILE_TEMPLATE, PORT_FILE_TEMPLATE
from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError
from applocker.id_encoder import IdEncoder
from applocker.ipc import MessageClient, MessageCodec, MessageHandler, MessageServer
from applocker.lock_outcome import LockAcquired, LockBusy, LockFailed, LockOutcome
from applocker.port_record import PortRecord
from applocker.shutdown import ShutdownRegistry

if TYPE_CHECKING:
	from applocker.builder import AppLockerBuilder

log = logging.getLogger(__name__)

BusyCallback = Callable[["AppLocker", LockingError], Any]
FailedCallback = Callable[[LockingError], None]


class AppLocker:
	"""Cross-process lock for one application identifier.

	Instances are created through the builder returned by AppLocker.create().
	lock() and unlock() on one instance are serialized; exclusion between
	processes comes from the advisory locks.
	"""

	def __init__(
		self,
		lock_id: str,
		lock_dir: Path,
		id_encoder: IdEncoder,
		config: AppLockerConfig,
		shutdown_registry: ShutdownRegistry,
		message_handler: MessageHandler | None = None,
		codec: MessageCodec | None = None,
		on_acquired: Callable[[], None] | None = None,
		on_busy: BusyCallback | None = None,
		on_failed: FailedCallback | None = None,
	):
		"""Initialize the locker.

		Args:
			lock_id: Identifier of the application to lock.
			lock_dir: Directory holding the lock and port files.
			id_encoder: Function turning identifiers into file name tokens.
			config: Timeouts and limits.
			shutdown_registry: Registry releasing the lock at interpreter exit.
			message_handler: Handler of the messages sent to this instance, None disables the message server.
			codec: Serialization contract of the messages.
			on_acquired: Called after the lock has been acquired.
			on_busy: Called when the lock is held elsewhere, returns the reply of the holder.
			on_failed: Called with the error when locking fails.
		"""
		self.lock_id = lock_id
		self.lock_dir = Path(lock_dir).absolute()
		self.config = config
		self.codec = codec or MessageCodec()
		self.global_lock = AdvisoryLock(
			self.lock_dir / LOCK_FILE_TEMPLATE.format(id_encoder(GLOBAL_LOCK_ID)),
			config.retry_interval,
		)
		encoded_id = id_encoder(lock_id)
		self.app_lock = AdvisoryLock(
			self.lock_dir / LOCK_FILE_TEMPLATE.format(encoded_id),
			config.retry_interval,
		)
		self.port_record = PortRecord(
			self.lock_dir / PORT_FILE_TEMPLATE.format(encoded_id)
		)
		self.server = None
		if message_handler is not None:
			self.server = MessageServer(
				message_handler,
				self.codec,
				accept_timeout=config.accept_timeout,
				client_timeout=config.client_timeout,
				max_message_size=config.max_message_size,
			)
		self.on_acquired = on_acquired
		self.on_busy = on_busy
		self.on_failed = on_failed
		self._shutdown_registry = shutdown_registry
		self._state_lock = threading.RLock()

	@staticmethod
	def create(lock_id: str) -> AppLockerBuilder:
		"""Create an AppLocker builder.

		Args:
			lock_id: Unique identifier of the application.

		Returns:
			The builder.
		"""
		from applocker.builder import AppLockerBuilder

		return AppLockerBuilder(lock_id)

	def lock(self) -> LockOutcome:
		"""Acquire the lock.

		Every outcome is reported through exactly one callback and returned;
		locking errors are never raised.

		Returns:
			LockAcquired, LockBusy or LockFailed.
		"""
		with self._state_lock:
			if self.is_locked():
				log.debug("%s is already locked", self.lock_id)
				return LockAcquired(lock_id=self.lock_id, port=self._server_port())
			try:
				self._acquire()
			except LockingError as e:
				error = e
			else:
				error = None
				self._shutdown_registry.register(self._release_on_exit)
		if error is None:
			log.info("Lock acquired for %s", self.lock_id)
			if self.on_acquired is not None:
				self.on_acquired()
			return LockAcquired(lock_id=self.lock_id, port=self._server_port())
		if error.is_busy:
			return self._handle_busy(error)
		log.warning("Unable to lock %s: %s", self.lock_id, error)
		self._notify_failed(error)
		return LockFailed(lock_id=self.lock_id, error=error)

	def unlock(self) -> None:
		"""Release the lock.

		Does nothing if the lock is not held by this instance.

		The global lock is waited for at most global_lock_timeout seconds. When
		it cannot be taken in time, a warning is logged and the server, the port
		record and the named lock are released without it: another process may
		then briefly see the named lock held with no port record, or the
		reverse.
		"""
		with self._state_lock:
			self._shutdown_registry.unregister(self._release_on_exit)
			self._release()

	def is_locked(self) -> bool:
		"""Check whether this instance holds the lock."""
		return self.app_lock.is_locked()

	def send_message(self, message: Any) -> Any:
		"""Send a message to the instance holding the lock, possibly this one.

		Args:
			message: The request, must match the request type of the codec.

		Returns:
			The answer of the holder's message handler.

		Raises:
			LockingError: COMMUNICATION if the holder cannot be reached or answers badly.
		"""
		port = self.port_record.read()
		client = MessageClient(
			port,
			self.codec,
			timeout=self.config.client_timeout,
			max_message_size=self.config.max_message_size,
		)
		try:
			return client.send(message)
		except LockingError as e:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				f"Unable to communicate with the holder of {self.lock_id}: {e}",
			) from e

	def _acquire(self) -> None:
		"""Take the named lock and publish the port under the global lock."""
		self.global_lock.lock_with_timeout(self.config.global_lock_timeout)
		try:
			self.app_lock.try_lock()
			if self.server is not None:
				try:
					self._start_server()
				except (LockingError, OSError) as e:
					self._rollback()
					raise LockingError(
						LockingErrorKind.COMMUNICATION,
						f"Unable to start message server: {e}",
					) from e
		finally:
			self.global_lock.unlock()

	def _start_server(self) -> None:
		self.server.start()
		port = self.server.get_port(self.config.port_timeout)
		self.port_record.write(port)

	def _rollback(self) -> None:
		"""Undo a partial acquisition, the global lock is held by the caller."""
		self.server.stop()
		self.port_record.delete()
		self.app_lock.unlock()

	def _release(self) -> None:
		if not self.app_lock.is_locked() and not (
			self.server is not None and self.server.is_running()
		):
			log.debug("%s is not locked, nothing to release", self.lock_id)
			return
		try:
			self.global_lock.lock_with_timeout(self.config.global_lock_timeout)
		except LockingError as e:
			# releasing is still safer than keeping a lock nobody will free
			log.warning("Releasing %s without the global lock: %s", self.lock_id, e)
		try:
			held = self.app_lock.is_locked()
			try:
				if self.server is not None:
					self.server.stop()
				if held:
					self.port_record.delete()
			finally:
				self.app_lock.unlock()
			if held:
				log.info("Lock released for %s", self.lock_id)
		finally:
			self.global_lock.unlock()

	def _release_on_exit(self) -> None:
		with self._state_lock:
			self._release()

	def _handle_busy(self, error: LockingError) -> LockOutcome:
		log.info("%s is locked by another instance", self.lock_id)
		if self.on_busy is None:
			self._notify_failed(error)
			return LockBusy(lock_id=self.lock_id, error=error)
		try:
			reply = self.on_busy(self, error)
		except LockingError as e:
			log.warning("Busy handler of %s failed: %s", self.lock_id, e)
			self._notify_failed(e)
			return LockFailed(lock_id=self.lock_id, error=e)
		return LockBusy(lock_id=self.lock_id, error=error, reply=reply)

	def _notify_failed(self, error: LockingError) -> None:
		if self.on_failed is not None:
			self.on_failed(error)

	def _server_port(self) -> int | None:
		if self.server is None or not self.server.is_running():
			return None
		try:
			return self.server.get_port(0)
		except LockingError:
			return None

	def __repr__(self) -> str:
		return f"AppLocker(lock_id={self.lock_id!r}, lock={self.app_lock!r})"
