"""Common test fixtures for applocker."""

import pytest

from applocker import AppLocker, AppLockerConfig, ShutdownRegistry


@pytest.fixture
def lock_dir(tmp_path):
	"""Return a directory for lock files, not created yet."""
	return tmp_path / "locks"


@pytest.fixture
def config(lock_dir):
	"""Return a config with short timeouts."""
	return AppLockerConfig(
		lock_dir=lock_dir,
		global_lock_timeout=2.0,
		port_timeout=2.0,
		client_timeout=2.0,
		accept_timeout=0.05,
		retry_interval=0.01,
	)


@pytest.fixture
def registry():
	"""Return a shutdown registry private to the test."""
	return ShutdownRegistry()


@pytest.fixture
def echo_handler():
	"""Return a message handler answering with the received message."""

	def handler(message):
		return message

	return handler


@pytest.fixture
def locker_factory(config, registry):
	"""Factory building AppLocker instances unlocked after the test.

	Keyword arguments map to builder setters: handler, busy, on_busy,
	failed, acquired, codec, id_encoder, config.
	"""
	lockers = []

	def factory(lock_id="sameId", **options):
		builder = (
			AppLocker.create(lock_id)
			.set_config(options.pop("config", config))
			.set_shutdown_registry(registry)
		)
		if "handler" in options:
			builder.set_message_handler(options.pop("handler"))
		if "busy" in options:
			builder.busy(*options.pop("busy"))
		if "on_busy" in options:
			builder.on_busy(options.pop("on_busy"))
		if "failed" in options:
			builder.failed(options.pop("failed"))
		if "acquired" in options:
			builder.acquired(options.pop("acquired"))
		if "codec" in options:
			builder.set_codec(options.pop("codec"))
		if "id_encoder" in options:
			builder.set_id_encoder(options.pop("id_encoder"))
		if "path" in options:
			builder.set_path(options.pop("path"))
		assert not options, f"unknown options: {options}"
		locker = builder.build()
		lockers.append(locker)
		return locker

	yield factory
	for locker in lockers:
		locker.unlock()
