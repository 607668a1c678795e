from __future__ import annotations

from enum import StrEnum, auto


class LockingErrorKind(StrEnum):
	BUSY = auto()
	FAILED = auto()
	TIMEOUT = auto()
	COMMUNICATION = auto()
	CONNECTION_REFUSED = auto()
	DESERIALIZE = auto()
	SERVER_NOT_RUNNING = auto()
	SERVER_FAULT = auto()
	FATAL = auto()

	@classmethod
	def get_labels(cls) -> dict[LockingErrorKind, str]:
		return {
			cls.BUSY: "Lock is already taken",
			cls.FAILED: "Unable to lock",
			cls.TIMEOUT: "Timed out",
			cls.COMMUNICATION: "Unable to communicate with the lock holder",
			cls.CONNECTION_REFUSED: "No message server is listening",
			cls.DESERIALIZE: "Unable to deserialize the message",
			cls.SERVER_NOT_RUNNING: "Message server is not running",
			cls.SERVER_FAULT: "Message server is in an exception state",
			cls.FATAL: "Lock state can no longer be trusted",
		}


class LockStatus(StrEnum):
	ACQUIRED = auto()
	BUSY = auto()
	FAILED = auto()


class LogLevel(StrEnum):
	NOTSET = "off"
	DEBUG = auto()
	INFO = auto()
	WARNING = auto()
	ERROR = auto()
	CRITICAL = auto()
