"""Encoding of lock identifiers into filesystem friendly tokens."""

import hashlib
from typing import Callable

IdEncoder = Callable[[str], str]


def sha1_encoder(value: str) -> str:
	"""Encode an identifier as the lowercase hex SHA-1 digest of its UTF-8 bytes.

	Args:
		value: The identifier to encode.

	Returns:
		A 40 characters token usable as a file name on every platform.
	"""
	return hashlib.sha1(value.encode("utf-8")).hexdigest()
