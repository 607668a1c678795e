"""Tests for MessageClient against a running MessageServer."""

import time
from datetime import datetime
from typing import Annotated, Literal, Union

import pytest
from pydantic import BaseModel, Field

from applocker import LockingError, LockingErrorKind, MessageClient, MessageCodec


class FocusRequest(BaseModel):
	kind: Literal["focus"] = "focus"
	timestamp: datetime


class OpenFileRequest(BaseModel):
	kind: Literal["open_file"] = "open_file"
	file_path: str


Request = Annotated[
	Union[FocusRequest, OpenFileRequest], Field(discriminator="kind")
]


class Answer(BaseModel):
	handled: bool
	detail: str = ""


class TestMessageClientRoundTrip:
	"""Test request and response exchange."""

	def test_send_text(self, echo_server):
		"""Test a plain string exchange."""
		client = MessageClient(echo_server.get_port(2.0), timeout=2.0)
		assert client.send("Hello") == "Hello"

	def test_send_structures(self, echo_server):
		"""Test that JSON compatible structures survive the exchange."""
		client = MessageClient(echo_server.get_port(2.0), timeout=2.0)
		message = {"args": ["--new-window", "file.txt"], "count": 2, "flag": None}
		assert client.send(message) == message

	def test_send_empty_string(self, echo_server):
		"""Test that an empty message is still a message."""
		client = MessageClient(echo_server.get_port(2.0), timeout=2.0)
		assert client.send("") == ""

	def test_large_message(self, echo_server):
		"""Test a message much larger than one socket read."""
		client = MessageClient(echo_server.get_port(2.0), timeout=5.0)
		message = "x" * (1024 * 1024)
		assert client.send(message) == message

	def test_tagged_union_models(self, server_factory):
		"""Test typed requests dispatched on their tag."""
		codec = MessageCodec(request_type=Request, response_type=Answer)

		def handler(request):
			match request:
				case FocusRequest():
					return Answer(handled=True, detail="focused")
				case OpenFileRequest(file_path=file_path):
					return Answer(handled=True, detail=file_path)

		server = server_factory(handler, codec=codec)
		server.start()
		client = MessageClient(server.get_port(2.0), codec=codec, timeout=2.0)

		answer = client.send(FocusRequest(timestamp=datetime.now()))
		assert answer == Answer(handled=True, detail="focused")

		answer = client.send(OpenFileRequest(file_path="/tmp/notes.txt"))
		assert isinstance(answer, Answer)
		assert answer.detail == "/tmp/notes.txt"

	def test_repr(self):
		client = MessageClient(4242)
		assert repr(client) == "MessageClient(host='127.0.0.1', port=4242)"


class TestMessageClientErrors:
	"""Test the error kinds reported by the client."""

	def test_connection_refused(self, unused_port):
		"""Test that a port nobody listens on is reported as refused."""
		client = MessageClient(unused_port, timeout=2.0)
		with pytest.raises(LockingError) as exc_info:
			client.send("Hello")
		assert exc_info.value.kind == LockingErrorKind.CONNECTION_REFUSED

	def test_request_rejected_by_server(self, server_factory):
		"""Test that a request of the wrong type gets no answer."""
		server = server_factory(
			lambda message: message,
			codec=MessageCodec(request_type=int, response_type=int),
		)
		server.start()
		client = MessageClient(
			server.get_port(2.0),
			codec=MessageCodec(request_type=str, response_type=int),
			timeout=2.0,
		)
		with pytest.raises(LockingError) as exc_info:
			client.send("not a number")
		assert exc_info.value.kind == LockingErrorKind.COMMUNICATION
		assert server.is_running()

	def test_unexpected_response_type(self, echo_server):
		"""Test that an answer of the wrong type is a deserialization error."""
		client = MessageClient(
			echo_server.get_port(2.0),
			codec=MessageCodec(response_type=int),
			timeout=2.0,
		)
		with pytest.raises(LockingError) as exc_info:
			client.send("text")
		assert exc_info.value.kind == LockingErrorKind.DESERIALIZE

	def test_unserializable_message(self, echo_server):
		"""Test that a message the codec cannot encode is never sent."""
		client = MessageClient(echo_server.get_port(2.0), timeout=2.0)
		with pytest.raises(LockingError) as exc_info:
			client.send(object())
		assert exc_info.value.kind == LockingErrorKind.COMMUNICATION

	def test_response_too_large(self, echo_server):
		"""Test that the client enforces its own size limit."""
		client = MessageClient(
			echo_server.get_port(2.0), timeout=2.0, max_message_size=8
		)
		with pytest.raises(LockingError) as exc_info:
			client.send("a rather long answer")
		assert exc_info.value.kind == LockingErrorKind.COMMUNICATION

	def test_timeout(self, server_factory):
		"""Test that a slow handler makes the client give up."""

		def slow_handler(message):
			time.sleep(1.0)
			return message

		server = server_factory(slow_handler)
		server.start()
		client = MessageClient(server.get_port(2.0), timeout=0.2)

		start = time.monotonic()
		with pytest.raises(LockingError) as exc_info:
			client.send("Hello")
		assert exc_info.value.kind == LockingErrorKind.COMMUNICATION
		assert time.monotonic() - start < 1.0
