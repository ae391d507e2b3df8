import logging
import socket
from typing import Callable, Optional, Tuple

from config import DEFAULT_PARAMETERS, HOST, PORT, ProtocolParameters
from handshake import Role
from key_exchange import EntropySource, time_entropy
from logging_util import setup_logger
from protocol import TransportError
from session import establish_session


def parse_port(value: str, allow_zero: bool = False) -> int:
    """Decimal TCP port; 0 (any free port) only when binding."""
    lowest = 0 if allow_zero else 1
    if not value.isdigit() or not lowest <= int(value) <= 65535:
        raise ValueError(f"Invalid port {value!r}, expected {lowest}-65535")
    return int(value)


def parse_address(address: str) -> Tuple[str, int]:
    """Split HOST:PORT on the last colon."""
    host, sep, port = address.rpartition(':')
    if not sep or not host:
        raise ValueError(f"Invalid address {address!r}, expected HOST:PORT")
    try:
        return host.strip('[]'), parse_port(port)
    except ValueError:
        raise ValueError(f"Invalid address {address!r}, expected HOST:PORT") from None


def connect(host: str, port: int) -> socket.socket:
    try:
        return socket.create_connection((host, port))
    except OSError as e:
        raise TransportError(f"Cannot connect to {host}:{port}: {e}") from e


class Client:
    """Connects, runs the connector handshake, then encrypts and sends operator input until EOF."""

    def __init__(self, host=HOST, port=PORT, params: ProtocolParameters = DEFAULT_PARAMETERS,
                 entropy: EntropySource = time_entropy, logger=None):
        self.host = host
        self.port = port
        self.params = params
        self.entropy = entropy
        setup_logger()
        self.logger = logger or logging.getLogger("streamchat.client")

    def start(self, read_line: Optional[Callable[[], str]] = None):
        client_socket = connect(self.host, self.port)
        self.logger.info(f"[CLIENT] Connected to {self.host}:{self.port}")
        with client_socket:
            stream = client_socket.makefile('rwb')
            with establish_session(Role.CONNECTOR, stream, self.params, self.entropy) as session:
                self.logger.info("[CHAT] Type message:")
                session.run(read_line)
        self.logger.info("Disconnected from server")
