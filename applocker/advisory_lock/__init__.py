"""Filesystem advisory locks for applocker."""

import sys

if sys.platform == "win32":
	from .windows_advisory_lock import WindowsAdvisoryLock as AdvisoryLock
else:
	from .posix_advisory_lock import PosixAdvisoryLock as AdvisoryLock

__all__ = ["AdvisoryLock"]
