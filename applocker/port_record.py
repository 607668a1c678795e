"""File publishing the message server port of the current lock holder."""

import logging
import os
import struct
from pathlib import Path

from applocker.consts import PORT_RECORD_FORMAT
from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

log = logging.getLogger(__name__)

PORT_RECORD_SIZE = struct.calcsize(PORT_RECORD_FORMAT)


class PortRecord:
	"""Port file holding exactly one big-endian signed 32-bit integer.

	The record is written to a temporary sibling and moved into place, so a
	reader sees it either fully present or absent.
	"""

	def __init__(self, path: Path | str):
		self.path = Path(path).absolute()

	def write(self, port: int) -> None:
		"""Publish a port.

		Args:
			port: The TCP port of the message server.
		"""
		tmp_path = self.path.with_name(f"{self.path.name}.{os.getpid()}.tmp")
		tmp_path.write_bytes(struct.pack(PORT_RECORD_FORMAT, port))
		try:
			os.replace(tmp_path, self.path)
		except OSError:
			tmp_path.unlink(missing_ok=True)
			raise
		log.debug("Port %d written to %s", port, self.path)

	def read(self) -> int:
		"""Read the published port.

		Returns:
			The TCP port of the lock holder's message server.

		Raises:
			LockingError: COMMUNICATION if no port is published or the record is malformed.
		"""
		try:
			data = self.path.read_bytes()
		except FileNotFoundError as e:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				"Unable to open port file, please check that message server is running",
			) from e
		except OSError as e:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				f"Unable to read port file {self.path}: {e}",
			) from e
		if len(data) != PORT_RECORD_SIZE:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				f"Port file {self.path} is malformed ({len(data)} bytes)",
			)
		(port,) = struct.unpack(PORT_RECORD_FORMAT, data)
		return port

	def delete(self) -> None:
		"""Remove the record, a missing record is not an error."""
		self.path.unlink(missing_ok=True)

	def exists(self) -> bool:
		return self.path.exists()

	def __repr__(self) -> str:
		return f"PortRecord(path={str(self.path)!r})"
