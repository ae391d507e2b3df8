"""Diffie-Hellman handshake over a blocking byte stream.

The two roles exchange 8-byte public values in opposite order: the listener
reads then writes, the connector writes then reads. Both sides reading first
would block forever, so each role keeps its own ordering and they never share
a code path for it.
"""
import logging
from enum import Enum
from typing import BinaryIO, Optional

from config import DEFAULT_PARAMETERS, ProtocolParameters
from key_exchange import EntropySource, KeyPair, derive_shared, generate_keypair, time_entropy
from protocol import recv_public, send_public

logger = logging.getLogger("streamchat.handshake")


class Role(Enum):
    LISTENER = "listener"
    CONNECTOR = "connector"


class HandshakeState(Enum):
    AWAITING_CONNECTION = "awaiting_connection"
    CONNECTING = "connecting"
    SENDING_OWN_PUBLIC = "sending_own_public"
    RECEIVING_PEER_PUBLIC = "receiving_peer_public"
    DONE = "done"


class Handshake:
    role: Role
    initial_state: HandshakeState

    def __init__(self, stream: BinaryIO, params: ProtocolParameters = DEFAULT_PARAMETERS,
                 entropy: EntropySource = time_entropy):
        self.stream = stream
        self.params = params
        self.entropy = entropy
        self.state = self.initial_state
        self.keypair: Optional[KeyPair] = None
        self.peer_public: Optional[int] = None
        self.shared_secret: Optional[int] = None

    def run(self) -> int:
        """Exchange public values and return the shared secret. I/O errors propagate."""
        dh = self.params.dh
        logger.info("[DH] Starting key exchange...")
        logger.info(f"p = {dh.modulus:016X} (64-bit prime - public)")
        logger.info(f"g = {dh.generator} (generator - public)")

        self.keypair = generate_keypair(dh, self.entropy)
        logger.info(f"private_key = {self.keypair.private:016X} (random 64-bit)")
        logger.info(f"public_key = g^private mod p = {self.keypair.public:016X}")

        self._exchange()

        self.shared_secret = derive_shared(self.peer_public, self.keypair, dh)
        self.state = HandshakeState.DONE
        logger.info(f"secret = ({self.peer_public:016X})^({self.keypair.private:016X}) mod p")
        logger.info(f"= {self.shared_secret:016X}")
        return self.shared_secret

    def _exchange(self):
        raise NotImplementedError

    def _send_own(self):
        self.state = HandshakeState.SENDING_OWN_PUBLIC
        send_public(self.stream, self.keypair.public)
        logger.info(f"-> Send our public: {self.keypair.public:016X}")

    def _receive_peer(self):
        self.state = HandshakeState.RECEIVING_PEER_PUBLIC
        self.peer_public = recv_public(self.stream)
        logger.info(f"<- Receive their public: {self.peer_public:016X}")


class ListenerHandshake(Handshake):
    role = Role.LISTENER
    initial_state = HandshakeState.AWAITING_CONNECTION

    def _exchange(self):
        self._receive_peer()
        self._send_own()


class ConnectorHandshake(Handshake):
    role = Role.CONNECTOR
    initial_state = HandshakeState.CONNECTING

    def _exchange(self):
        self._send_own()
        self._receive_peer()


HANDSHAKES = {
    Role.LISTENER: ListenerHandshake,
    Role.CONNECTOR: ConnectorHandshake,
}


def perform_handshake(role: Role, stream: BinaryIO, params: ProtocolParameters = DEFAULT_PARAMETERS,
                      entropy: EntropySource = time_entropy) -> int:
    return HANDSHAKES[role](stream, params, entropy).run()
