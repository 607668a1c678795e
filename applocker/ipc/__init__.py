"""Inter-process messaging between applocker instances.

The lock holder runs a MessageServer on a loopback TCP port; other instances
reach it with a MessageClient.
"""

from .ipc_model import MessageCodec
from .message_client import MessageClient
from .message_server import MessageHandler, MessageServer

__all__ = ["MessageClient", "MessageCodec", "MessageHandler", "MessageServer"]
