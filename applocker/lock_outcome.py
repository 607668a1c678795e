"""Result of an AppLocker.lock() attempt.

The outcome is a tagged union discriminated by ``status`` so callers can
pattern match on it::

	match locker.lock():
		case LockAcquired():
			run_application()
		case LockBusy(reply=reply):
			print("already running, answered", reply)
		case LockFailed(error=error):
			print("unable to lock", error)
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from applocker.enums import LockStatus
from applocker.exceptions import LockingError


class LockAcquired(BaseModel):
	"""The lock is held by the caller."""

	model_config = ConfigDict(frozen=True)

	status: Literal[LockStatus.ACQUIRED] = LockStatus.ACQUIRED
	lock_id: str
	port: int | None = None


class LockBusy(BaseModel):
	"""Another instance holds the lock.

	``reply`` holds the answer of the lock holder when a busy protocol is configured.
	"""

	model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

	status: Literal[LockStatus.BUSY] = LockStatus.BUSY
	lock_id: str
	error: LockingError
	reply: Any = None


class LockFailed(BaseModel):
	"""The lock could not be acquired for any other reason."""

	model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

	status: Literal[LockStatus.FAILED] = LockStatus.FAILED
	lock_id: str
	error: LockingError


LockOutcome = Annotated[
	Union[LockAcquired, LockBusy, LockFailed], Field(discriminator="status")
]
