"""Tests for identifier encoding."""

import pytest

from applocker import sha1_encoder
from applocker.consts import GLOBAL_LOCK_ID


class TestSha1Encoder:
	"""Test the default identifier encoder."""

	def test_known_digest(self):
		assert sha1_encoder("abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"

	def test_empty_identifier(self):
		assert sha1_encoder("") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"

	@pytest.mark.parametrize(
		"value", ["sameId", "with/slash", "C:\\path", "ünïcødé", GLOBAL_LOCK_ID]
	)
	def test_file_name_safe(self, value):
		encoded = sha1_encoder(value)
		assert len(encoded) == 40
		assert all(c in "0123456789abcdef" for c in encoded)

	def test_deterministic(self):
		assert sha1_encoder("sameId") == sha1_encoder("sameId")
		assert sha1_encoder("sameId") != sha1_encoder("sameid")
