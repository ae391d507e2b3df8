import logging
from typing import BinaryIO, Callable, Iterator, Optional

from config import (
    DECODE_ERRORS,
    DEFAULT_PARAMETERS,
    KEYSTREAM_PREVIEW_BYTES,
    KEYSTREAM_PREVIEW_SHOWN,
    ProtocolParameters,
)
from handshake import Role, perform_handshake
from key_exchange import EntropySource, time_entropy
from keystream import KeystreamGenerator
from messages import Frame
from protocol import recv_line, send_frame
from utils import hex_bytes, keystream_preview, xor_stream

logger = logging.getLogger("streamchat.session")


class Session:
    """Owns the transport and keystream once the handshake has succeeded."""
    role: Role

    def __init__(self, stream: BinaryIO, shared_secret: int,
                 params: ProtocolParameters = DEFAULT_PARAMETERS):
        self.stream = stream
        self.shared_secret = shared_secret
        self.keystream = KeystreamGenerator(shared_secret, params.lcg)

    def announce(self):
        self.keystream.describe()
        logger.info("Keystream: " + keystream_preview(
            self.keystream, KEYSTREAM_PREVIEW_BYTES, KEYSTREAM_PREVIEW_SHOWN))
        logger.info("Secure channel established!")

    def close(self):
        self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ListenerSession(Session):
    """Reads frames and decrypts them. Never sends."""
    role = Role.LISTENER

    def decrypt(self, frame: Frame) -> str:
        ciphertext = frame.ciphertext
        logger.debug(f"[DECRYPT] Received {len(ciphertext)} bytes")
        logger.debug(f"Cipher: {hex_bytes(ciphertext, limit=3)}")
        logger.debug(f"Key: {hex_bytes(self.keystream.peek(3), limit=len(ciphertext))}"
                     f" (keystream position: {self.keystream.position})")
        plain = xor_stream(ciphertext, self.keystream)
        message = plain.decode(errors=DECODE_ERRORS)
        logger.debug(f"Plain: {hex_bytes(plain, limit=3)} -> {message!r}")
        return message

    def receive(self) -> Iterator[str]:
        while True:
            line = recv_line(self.stream)
            if line is None:
                return
            frame = Frame.from_line(line)
            if not frame:
                continue
            yield self.decrypt(frame)

    def run(self, display: Optional[Callable[[str], None]] = None):
        display = display or (lambda message: logger.info(f"[CLIENT] {message}"))
        for message in self.receive():
            display(message)
        logger.info("Peer closed the connection")


class ConnectorSession(Session):
    """Reads operator input, encrypts it and sends it. Never receives."""
    role = Role.CONNECTOR

    def encrypt(self, message: str) -> Frame:
        plain = message.encode()
        logger.debug(f"[ENCRYPT] Plain: {hex_bytes(plain, limit=8)} ({message!r})")
        logger.debug(f"Key: {hex_bytes(self.keystream.peek(min(len(plain), 4)))}"
                     f" (keystream position: {self.keystream.position})")
        frame = Frame(xor_stream(plain, self.keystream))
        logger.debug(f"Cipher: {hex_bytes(frame.ciphertext, limit=5)}")
        return frame

    def send(self, message: str) -> Frame:
        frame = self.encrypt(message)
        send_frame(self.stream, frame)
        logger.debug(f"Sent {len(frame)} bytes")
        return frame

    def run(self, read_line: Optional[Callable[[], str]] = None):
        read_line = read_line or (lambda: input("> "))
        while True:
            try:
                message = read_line()
            except EOFError:
                break
            if not message.strip():
                continue
            self.send(message)
        logger.info("Input closed, ending session")


SESSIONS = {
    Role.LISTENER: ListenerSession,
    Role.CONNECTOR: ConnectorSession,
}


def establish_session(role: Role, stream: BinaryIO, params: ProtocolParameters = DEFAULT_PARAMETERS,
                      entropy: EntropySource = time_entropy) -> Session:
    """Run the role's handshake on stream and wrap the result. Handshake errors propagate."""
    shared_secret = perform_handshake(role, stream, params, entropy)
    session = SESSIONS[role](stream, shared_secret, params)
    session.announce()
    return session
