"""Cross-process application locking with a messaging channel to the lock holder."""

from .advisory_lock import AdvisoryLock
from .app_locker import AppLocker
from .builder import AppLockerBuilder
from .config import AppLockerConfig, get_app_locker_config
from .enums import LockingErrorKind, LockStatus
from .exceptions import LockingError
from .id_encoder import IdEncoder, sha1_encoder
from .ipc import MessageClient, MessageCodec, MessageHandler, MessageServer
from .lock_outcome import LockAcquired, LockBusy, LockFailed, LockOutcome
from .port_record import PortRecord
from .shutdown import ShutdownRegistry, shutdown_registry

__all__ = [
	"AdvisoryLock",
	"AppLocker",
	"AppLockerBuilder",
	"AppLockerConfig",
	"get_app_locker_config",
	"IdEncoder",
	"LockAcquired",
	"LockBusy",
	"LockFailed",
	"LockingError",
	"LockingErrorKind",
	"LockOutcome",
	"LockStatus",
	"MessageClient",
	"MessageCodec",
	"MessageHandler",
	"MessageServer",
	"PortRecord",
	"sha1_encoder",
	"ShutdownRegistry",
	"shutdown_registry",
]
