"""Serialization contract of the messages exchanged between applocker instances.

The sender and the receiver agree on the request and response types up front.
Payloads are JSON documents produced and validated by pydantic, so a payload of
the wrong type is reported as a deserialization failure instead of surfacing
later as an unrelated error in application code.
"""

from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from applocker.enums import LockingErrorKind
from applocker.exceptions import LockingError


class MessageCodec:
	"""Encode and decode requests and responses.

	Any type pydantic can validate is supported: builtins, containers,
	dataclasses and BaseModel subclasses (tagged unions included).
	"""

	def __init__(self, request_type: Any = Any, response_type: Any = Any):
		"""Initialize the codec.

		Args:
			request_type: Type of the messages sent to the lock holder.
			response_type: Type of the answers sent back by the lock holder.
		"""
		self.request_type = request_type
		self.response_type = response_type
		self.request_adapter = TypeAdapter(request_type)
		self.response_adapter = TypeAdapter(response_type)

	def encode_request(self, message: Any) -> bytes:
		return self._encode(self.request_adapter, message)

	def decode_request(self, payload: bytes) -> Any:
		return self._decode(self.request_adapter, payload)

	def encode_response(self, message: Any) -> bytes:
		return self._encode(self.response_adapter, message)

	def decode_response(self, payload: bytes) -> Any:
		return self._decode(self.response_adapter, payload)

	@staticmethod
	def _encode(adapter: TypeAdapter, message: Any) -> bytes:
		try:
			return adapter.dump_json(message)
		except PydanticSerializationError as e:
			raise LockingError(
				LockingErrorKind.COMMUNICATION,
				f"Unable to serialize the message: {e}",
			) from e

	@staticmethod
	def _decode(adapter: TypeAdapter, payload: bytes) -> Any:
		try:
			return adapter.validate_json(payload)
		except ValidationError as e:
			raise LockingError(
				LockingErrorKind.DESERIALIZE,
				f"Unable to deserialize the message: {e}",
			) from e

	def __repr__(self) -> str:
		return f"MessageCodec(request_type={self.request_type!r}, response_type={self.response_type!r})"
