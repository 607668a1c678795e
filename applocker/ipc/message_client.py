"""Client side of the applocker messaging channel."""

import logging
import socket
from typing import Any

from applocker.consts import (
	DEFAULT_CLIENT_TIMEOUT,
	DEFAULT_MAX_MESSAGE_SIZE,
	LOCALHOST,
)
from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

from .framing import recv_frame, send_frame
from .ipc_model import MessageCodec

log = logging.getLogger(__name__)


class MessageClient:
	"""Short lived client talking to a MessageServer.

	Every call to send opens a new connection, writes one request, reads one
	response and closes. There is no retry at this level.
	"""

	def __init__(
		self,
		port: int,
		codec: MessageCodec | None = None,
		timeout: float = DEFAULT_CLIENT_TIMEOUT,
		host: str = LOCALHOST,
		max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
	):
		"""Initialize the client.

		Args:
			port: Port of the message server.
			codec: Serialization contract shared with the server.
			timeout: Seconds the connection may block on I/O.
			host: Address of the message server.
			max_message_size: Largest accepted response payload in bytes.
		"""
		self.port = port
		self.codec = codec or MessageCodec()
		self.timeout = timeout
		self.host = host
		self.max_message_size = max_message_size

	def send(self, message: Any) -> Any:
		"""Send a message and wait for the answer.

		Args:
			message: The request, must match the request type of the codec.

		Returns:
			The decoded response.

		Raises:
			LockingError: CONNECTION_REFUSED if nobody listens on the port,
				DESERIALIZE if the response does not match the response type,
				COMMUNICATION on any other failure.
		"""
		payload = self.codec.encode_request(message)
		try:
			with socket.create_connection(
				(self.host, self.port), timeout=self.timeout
			) as sock:
				send_frame(sock, payload)
				answer = recv_frame(sock, self.max_message_size)
		except ConnectionRefusedError as e:
			raise LockingError(
				LockingErrorKind.CONNECTION_REFUSED,
				f"Unable to connect to the message server on port {self.port}",
			) from e
		except LockingError as e:
			log.debug("No answer received from port %d: %s", self.port, e)
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				f"No answer received from the message server: {e}",
			) from e
		except OSError as e:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				f"Error communicating with the message server: {e}",
			) from e
		return self.codec.decode_response(answer)

	def __repr__(self) -> str:
		return f"MessageClient(host={self.host!r}, port={self.port})"
