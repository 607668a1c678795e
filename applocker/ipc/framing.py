"""Length prefixed framing of messages exchanged over a stream socket.

Each frame is a 4 bytes big-endian unsigned payload length followed by the
payload itself. A connection carries one request frame and one response frame.
"""

import socket
import struct

from applocker.consts import DEFAULT_MAX_MESSAGE_SIZE, FRAME_HEADER_FORMAT
from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

HEADER_SIZE = struct.calcsize(FRAME_HEADER_FORMAT)


def send_frame(sock: socket.socket, payload: bytes) -> None:
	"""Write one frame to the socket.

	Args:
		sock: A connected socket.
		payload: The message bytes.
	"""
	sock.sendall(struct.pack(FRAME_HEADER_FORMAT, len(payload)) + payload)


def recv_frame(
	sock: socket.socket, max_size: int = DEFAULT_MAX_MESSAGE_SIZE
) -> bytes:
	"""Read one frame from the socket.

	Args:
		sock: A connected socket.
		max_size: Largest payload accepted, in bytes.

	Returns:
		The payload of the frame.

	Raises:
		LockingError: COMMUNICATION if the peer closed the connection early or announced an oversized payload.
	"""
	(size,) = struct.unpack(FRAME_HEADER_FORMAT, _recv_exactly(sock, HEADER_SIZE))
	if size > max_size:
		raise LockingError(
			LockingErrorKind.COMMUNICATION,
			f"Message of {size} bytes exceeds the limit of {max_size} bytes",
		)
	return _recv_exactly(sock, size)


def _recv_exactly(sock: socket.socket, size: int) -> bytes:
	chunks = []
	remaining = size
	while remaining:
		chunk = sock.recv(min(remaining, 65536))
		if not chunk:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				"Connection closed before the whole message was received",
			)
		chunks.append(chunk)
		remaining -= len(chunk)
	return b"".join(chunks)
