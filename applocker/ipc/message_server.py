"""Socket server answering the messages sent to the lock holder.

The server listens on an ephemeral loopback port and serves one connection at
a time from a single daemon thread: read one request frame, hand the decoded
message to the handler, write one response frame, close.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from typing import Any, Callable

from applocker.consts import (
	DEFAULT_ACCEPT_TIMEOUT,
	DEFAULT_CLIENT_TIMEOUT,
	DEFAULT_MAX_MESSAGE_SIZE,
	LOCALHOST,
)
from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError

from .framing import recv_frame, send_frame
from .ipc_model import MessageCodec

log = logging.getLogger(__name__)

MessageHandler = Callable[[Any], Any]

# interval between two checks of the port while waiting for it
PORT_POLL_INTERVAL = 0.01


class MessageServer:
	"""Sequential request/response server bound to the loopback interface.

	Failures while serving a connection (undecodable payload, handler
	exception, client gone) are logged and the server moves on to the next
	client. A handler returning None sends no response: the client notices the
	connection closing without an answer.
	"""

	def __init__(
		self,
		handler: MessageHandler,
		codec: MessageCodec | None = None,
		accept_timeout: float = DEFAULT_ACCEPT_TIMEOUT,
		client_timeout: float = DEFAULT_CLIENT_TIMEOUT,
		max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
	):
		"""Initialize the server, nothing is bound until start is called.

		Args:
			handler: Function called with each decoded request, returns the response.
			codec: Serialization contract of the requests and responses.
			accept_timeout: Seconds accept blocks before checking for a stop request.
			client_timeout: Seconds a connection may block on I/O.
			max_message_size: Largest accepted request payload in bytes.
		"""
		self.handler = handler
		self.codec = codec or MessageCodec()
		self.accept_timeout = accept_timeout
		self.client_timeout = client_timeout
		self.max_message_size = max_message_size
		self.thread: threading.Thread | None = None
		self._stop_event = threading.Event()
		self._port_ready = threading.Event()
		self._port: int | None = None
		self._server_socket: socket.socket | None = None
		self._connection: socket.socket | None = None
		self._error: BaseException | None = None

	def start(self) -> None:
		"""Start the background worker.

		Raises:
			LockingError: COMMUNICATION if the server is already running.
		"""
		if self.thread is not None:
			raise LockingError(
				LockingErrorKind.COMMUNICATION, "The server is already running"
			)
		self._stop_event = threading.Event()
		self._port_ready = threading.Event()
		self._port = None
		self._error = None
		self.thread = threading.Thread(
			target=self._run_server,
			args=(self._stop_event, self._port_ready),
			name="applocker message server",
			daemon=True,
		)
		self.thread.start()
		log.debug("Message server started")

	def stop(self) -> None:
		"""Stop the background worker.

		An in-flight request is interrupted rather than drained. Does nothing if
		the server is not running.
		"""
		thread = self.thread
		if thread is None:
			return
		self.thread = None
		self._stop_event.set()
		for sock in (self._connection, self._server_socket):
			if sock is None:
				continue
			try:
				sock.shutdown(socket.SHUT_RDWR)
			except OSError:
				# not connected or already closed
				pass
		if thread is not threading.current_thread():
			thread.join(timeout=self.accept_timeout + 1.0)
			if thread.is_alive():
				log.warning("Message server thread did not stop in time")
		self._port = None
		log.debug("Message server stopped")

	def is_running(self) -> bool:
		"""Check whether the background worker is alive."""
		return self.thread is not None and self.thread.is_alive()

	def get_port(self, timeout: float) -> int:
		"""Wait until the worker has bound its socket and return the port.

		Args:
			timeout: Maximum number of seconds to wait.

		Returns:
			The TCP port the server listens on.

		Raises:
			LockingError: SERVER_NOT_RUNNING if the server was never started,
				SERVER_FAULT if the worker terminated, TIMEOUT if no port was
				published in time.
		"""
		thread = self.thread
		if thread is None:
			raise LockingError(LockingErrorKind.SERVER_NOT_RUNNING)
		deadline = time.monotonic() + timeout
		while True:
			if not thread.is_alive():
				reason = self._error or "worker exited before publishing its port"
				raise LockingError(
					LockingErrorKind.SERVER_FAULT,
					f"Message server terminated unexpectedly: {reason}",
				)
			port = self._port
			if port is not None:
				return port
			remaining = deadline - time.monotonic()
			if remaining <= 0:
				raise LockingError(
					LockingErrorKind.TIMEOUT,
					f"Message server did not publish its port within {timeout} seconds",
				)
			self._port_ready.wait(min(remaining, PORT_POLL_INTERVAL))

	def _run_server(
		self, stop_event: threading.Event, port_ready: threading.Event
	) -> None:
		"""Run the accept loop until a stop is requested.

		A worker that outlived stop() may still be finishing a request after a
		restart, so it only clears the socket references it set itself.
		"""
		sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		self._server_socket = sock
		try:
			with sock:
				sock.bind((LOCALHOST, 0))
				sock.listen()
				sock.settimeout(self.accept_timeout)
				self._port = sock.getsockname()[1]
				port_ready.set()
				log.info("Message server listening on %s:%d", LOCALHOST, self._port)
				while not stop_event.is_set():
					try:
						conn, _ = sock.accept()
					except socket.timeout:
						continue
					except OSError:
						if stop_event.is_set():
							break
						raise
					with conn:
						self._connection = conn
						try:
							self._handle_client(conn)
						finally:
							if self._connection is conn:
								self._connection = None
		except Exception as e:
			if self._stop_event is stop_event:
				self._error = e
			log.error("Error in message server: %s", e, exc_info=True)
		finally:
			if self._server_socket is sock:
				self._server_socket = None

	def _handle_client(self, conn: socket.socket) -> None:
		"""Serve one request on an accepted connection."""
		conn.settimeout(self.client_timeout)
		try:
			request = self.codec.decode_request(
				recv_frame(conn, self.max_message_size)
			)
			response = self.handler(request)
			if response is None:
				log.debug("Handler produced no response for %r", request)
				return
			send_frame(conn, self.codec.encode_response(response))
		except LockingError as e:
			log.error("Invalid message received: %s", e)
		except Exception as e:
			log.error("Error handling client: %s", e, exc_info=True)
