"""Fluent builder of AppLocker instances."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from applocker.app_locker import AppLocker, BusyCallback, FailedCallback
from applocker.config import AppLockerConfig, get_app_locker_config
from applocker.exceptions import LockingError
from applocker.id_encoder import IdEncoder, sha1_encoder
from applocker.ipc import MessageCodec, MessageHandler
from applocker.shutdown import ShutdownRegistry, shutdown_registry


class AppLockerBuilder:
	"""Collect the AppLocker options, every setter returns the builder.

	Example::

		locker = (
			AppLocker.create("my-app")
			.set_message_handler(on_message)
			.busy("focus", print)
			.failed(log_error)
			.build()
		)
	"""

	def __init__(self, lock_id: str):
		self.lock_id = lock_id
		self.path: Path | None = None
		self.id_encoder: IdEncoder = sha1_encoder
		self.message_handler: MessageHandler | None = None
		self.codec: MessageCodec | None = None
		self.config: AppLockerConfig | None = None
		self.shutdown_registry: ShutdownRegistry = shutdown_registry
		self.acquired_handler: Callable[[], None] | None = None
		self.busy_handler: BusyCallback | None = None
		self.failed_handler: FailedCallback | None = None

	def set_path(self, path: Path | str) -> AppLockerBuilder:
		"""Set the directory where the lock files are stored.

		Defaults to the lock_dir of the configuration.
		"""
		self.path = Path(path)
		return self

	def set_id_encoder(self, id_encoder: IdEncoder) -> AppLockerBuilder:
		"""Set the function encoding the identifier into a file name token.

		Defaults to sha1_encoder.
		"""
		self.id_encoder = id_encoder
		return self

	def set_message_handler(self, handler: MessageHandler) -> AppLockerBuilder:
		"""Set the handler of messages sent to the lock holder.

		Without a handler the AppLocker does not run a message server.
		"""
		self.message_handler = handler
		return self

	def set_codec(self, codec: MessageCodec) -> AppLockerBuilder:
		"""Set the serialization contract of the messages.

		Defaults to JSON compatible values of any type.
		"""
		self.codec = codec
		return self

	def set_config(self, config: AppLockerConfig) -> AppLockerBuilder:
		self.config = config
		return self

	def set_shutdown_registry(
		self, registry: ShutdownRegistry
	) -> AppLockerBuilder:
		self.shutdown_registry = registry
		return self

	def acquired(self, callback: Callable[[], None]) -> AppLockerBuilder:
		"""Set the function called after a successful lock."""
		self.acquired_handler = callback
		return self

	def busy(
		self, message: Any, handler: Callable[[Any], None] | None = None
	) -> AppLockerBuilder:
		"""Message the lock holder when the lock is already taken.

		Args:
			message: Message sent to the lock holder.
			handler: Function receiving the answer of the lock holder.
		"""

		def send_to_holder(locker: AppLocker, error: LockingError) -> Any:
			answer = locker.send_message(message)
			if handler is not None:
				handler(answer)
			return answer

		self.busy_handler = send_to_holder
		return self

	def on_busy(self, callback: BusyCallback) -> AppLockerBuilder:
		"""Set a custom function called when the lock is already taken.

		The callback receives the AppLocker and the busy error, its return
		value is reported as the reply of the LockBusy outcome.
		"""
		self.busy_handler = callback
		return self

	def failed(self, callback: FailedCallback) -> AppLockerBuilder:
		"""Set the function called with the error when locking fails.

		It is also called when the lock is busy and no busy handler is set.
		"""
		self.failed_handler = callback
		return self

	def build(self) -> AppLocker:
		config = self.config or get_app_locker_config()
		return AppLocker(
			self.lock_id,
			self.path or config.lock_dir,
			self.id_encoder,
			config,
			self.shutdown_registry,
			message_handler=self.message_handler,
			codec=self.codec,
			on_acquired=self.acquired_handler,
			on_busy=self.busy_handler,
			on_failed=self.failed_handler,
		)
