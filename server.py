import logging
import socket
from typing import Callable, Optional

from config import BACKLOG, DEFAULT_PARAMETERS, LISTEN_HOST, PORT, ProtocolParameters
from handshake import Role
from key_exchange import EntropySource, time_entropy
from logging_util import setup_logger
from protocol import TransportError
from session import establish_session


class Server:
    """Accepts exactly one connection, runs the listener handshake, then decrypts until the peer closes."""

    def __init__(self, host=LISTEN_HOST, port=PORT, params: ProtocolParameters = DEFAULT_PARAMETERS,
                 entropy: EntropySource = time_entropy, logger=None):
        self.host = host
        self.port = port
        self.params = params
        self.entropy = entropy
        setup_logger()
        self.logger = logger or logging.getLogger("streamchat.server")
        self.server_socket = None

    def bind(self):
        try:
            self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.server_socket.bind((self.host, self.port))
            self.server_socket.listen(BACKLOG)
        except (OSError, OverflowError) as e:
            self.close()
            raise TransportError(f"Cannot listen on {self.host}:{self.port}: {e}") from e
        self.port = self.server_socket.getsockname()[1]
        self.logger.info(f"[SERVER] Listening on {self.host}:{self.port}")

    def accept(self):
        self.logger.info("[SERVER] Waiting for client...")
        try:
            client_socket, client_address = self.server_socket.accept()
        except OSError as e:
            raise TransportError(f"Accept failed: {e}") from e
        self.logger.info(f"[CLIENT] Connected from {client_address[0]}:{client_address[1]}")
        return client_socket

    def handle_client(self, client_socket, display: Optional[Callable[[str], None]] = None):
        with client_socket:
            stream = client_socket.makefile('rwb')
            with establish_session(Role.LISTENER, stream, self.params, self.entropy) as session:
                session.run(display)
        self.logger.info("Disconnected")

    def close(self):
        if self.server_socket is not None:
            self.server_socket.close()
            self.server_socket = None

    def start(self, display: Optional[Callable[[str], None]] = None):
        if self.server_socket is None:
            self.bind()
        try:
            client_socket = self.accept()
        finally:
            self.close()
        self.handle_client(client_socket, display)
