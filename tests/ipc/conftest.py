"""IPC-specific fixtures for pytest."""

import socket

import pytest

from applocker import MessageServer


@pytest.fixture
def server_factory():
	"""Factory for creating message servers stopped after the test."""
	servers = []

	def factory(handler, **kwargs):
		kwargs.setdefault("accept_timeout", 0.05)
		kwargs.setdefault("client_timeout", 2.0)
		server = MessageServer(handler, **kwargs)
		servers.append(server)
		return server

	yield factory
	for server in servers:
		server.stop()


@pytest.fixture
def echo_server(server_factory):
	"""Start a server answering with the received message."""
	server = server_factory(lambda message: message)
	server.start()
	server.get_port(2.0)
	return server


@pytest.fixture
def unused_port():
	"""Provide a loopback port nobody listens on."""
	with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
		sock.bind(("127.0.0.1", 0))
		return sock.getsockname()[1]


@pytest.fixture
def raw_exchange():
	"""Send raw bytes to a port and return everything received back."""

	def exchange(port, data, timeout=2.0):
		with socket.create_connection(("127.0.0.1", port), timeout=timeout) as sock:
			sock.sendall(data)
			sock.shutdown(socket.SHUT_WR)
			chunks = []
			while True:
				try:
					chunk = sock.recv(65536)
				except ConnectionResetError:
					break
				if not chunk:
					break
				chunks.append(chunk)
			return b"".join(chunks)

	return exchange
