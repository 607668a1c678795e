"""Constant values used across the applocker package."""

import os
import tempfile

# application name
APP_NAME = "applocker"

# application author, used for platform specific directories
APP_AUTHOR = "applocker"

# default directory holding lock and port files
TMP_DIR = os.path.join(tempfile.gettempdir(), APP_NAME)

# identifier of the lock shared by every AppLocker on the machine
GLOBAL_LOCK_ID = "Unique global lock"

# file name of a lock, formatted with the encoded identifier
LOCK_FILE_TEMPLATE = ".{}.lock"

# file name of a port record, formatted with the encoded identifier
PORT_FILE_TEMPLATE = ".{}_port.lock"

# struct format of a port record: big-endian signed 32-bit integer
PORT_RECORD_FORMAT = ">i"

# struct format of a message frame header: big-endian unsigned 32-bit length
FRAME_HEADER_FORMAT = ">I"

# interface the message server binds to
LOCALHOST = "127.0.0.1"

# seconds slept between two busy lock attempts
DEFAULT_RETRY_INTERVAL = 0.05

# seconds to wait for the global lock
DEFAULT_GLOBAL_LOCK_TIMEOUT = 10.0

# seconds to wait for the message server to publish its port
DEFAULT_PORT_TIMEOUT = 5.0

# seconds a client or a server connection may block on I/O
DEFAULT_CLIENT_TIMEOUT = 5.0

# seconds the server blocks in accept before checking for a stop request
DEFAULT_ACCEPT_TIMEOUT = 0.2

# largest accepted message payload in bytes
DEFAULT_MAX_MESSAGE_SIZE = 16 * 1024 * 1024
