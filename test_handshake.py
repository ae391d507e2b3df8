import socket
import struct
import threading

import pytest

from config import DEFAULT_PARAMETERS, G_GENERATOR, P_MODULUS
from handshake import (
    ConnectorHandshake,
    HandshakeState,
    ListenerHandshake,
    Role,
    perform_handshake,
)
from protocol import HandshakeError, TransportError, recv_public, send_public

LISTENER_PRIVATE = 0x0123456789ABCDEF
CONNECTOR_PRIVATE = 0x0FEDCBA987654321


def public_of(private):
    return pow(G_GENERATOR, private, P_MODULUS)


def test_public_value_is_eight_bytes_big_endian(fake_stream):
    stream = fake_stream()
    send_public(stream, 0x0102030405060708)
    assert stream.sent == b"\x01\x02\x03\x04\x05\x06\x07\x08"
    assert recv_public(fake_stream(stream.sent)) == 0x0102030405060708


def test_listener_reads_before_writing(fake_stream):
    stream = fake_stream(struct.pack('>Q', public_of(CONNECTOR_PRIVATE)))
    hs = ListenerHandshake(stream, entropy=lambda: LISTENER_PRIVATE)
    assert hs.state is HandshakeState.AWAITING_CONNECTION

    secret = hs.run()

    assert stream.calls.index("read") < stream.calls.index("write")
    assert stream.sent == struct.pack('>Q', public_of(LISTENER_PRIVATE))
    assert secret == pow(public_of(CONNECTOR_PRIVATE), LISTENER_PRIVATE, P_MODULUS)
    assert hs.state is HandshakeState.DONE


def test_connector_writes_before_reading(fake_stream):
    stream = fake_stream(struct.pack('>Q', public_of(LISTENER_PRIVATE)))
    hs = ConnectorHandshake(stream, entropy=lambda: CONNECTOR_PRIVATE)
    assert hs.state is HandshakeState.CONNECTING

    secret = hs.run()

    assert stream.calls.index("write") < stream.calls.index("read")
    assert stream.sent == struct.pack('>Q', public_of(CONNECTOR_PRIVATE))
    assert secret == pow(public_of(LISTENER_PRIVATE), CONNECTOR_PRIVATE, P_MODULUS)


def test_short_read_aborts_handshake(fake_stream):
    stream = fake_stream(b"\x00\x01\x02")
    with pytest.raises(HandshakeError):
        perform_handshake(Role.LISTENER, stream, entropy=lambda: LISTENER_PRIVATE)
    assert stream.sent == b""


def test_handshake_error_is_transport_error(fake_stream):
    with pytest.raises(TransportError):
        perform_handshake(Role.CONNECTOR, fake_stream(), entropy=lambda: CONNECTOR_PRIVATE)


def test_both_roles_agree_over_socket():
    left, right = socket.socketpair()
    left.settimeout(5)
    right.settimeout(5)
    results = {}

    def listen():
        with left, left.makefile('rwb') as stream:
            results[Role.LISTENER] = perform_handshake(
                Role.LISTENER, stream, DEFAULT_PARAMETERS, lambda: LISTENER_PRIVATE)

    thread = threading.Thread(target=listen)
    thread.start()
    with right, right.makefile('rwb') as stream:
        results[Role.CONNECTOR] = perform_handshake(
            Role.CONNECTOR, stream, DEFAULT_PARAMETERS, lambda: CONNECTOR_PRIVATE)
    thread.join(5)

    assert not thread.is_alive()
    assert results[Role.LISTENER] == results[Role.CONNECTOR]
    assert results[Role.LISTENER] == pow(G_GENERATOR, LISTENER_PRIVATE * CONNECTOR_PRIVATE, P_MODULUS)


def test_peer_closing_mid_handshake_raises():
    left, right = socket.socketpair()
    right.settimeout(5)
    left.close()
    with right, right.makefile('rwb') as stream:
        with pytest.raises(HandshakeError):
            perform_handshake(Role.LISTENER, stream, entropy=lambda: LISTENER_PRIVATE)


@pytest.mark.parametrize("failing", ["write", "flush"])
def test_send_public_failure_is_transport_error(fake_stream, failing):
    with pytest.raises(TransportError) as excinfo:
        send_public(fake_stream(fail_on=[failing]), 42)
    assert not isinstance(excinfo.value, HandshakeError)


def test_connector_write_failure_aborts_before_reading(fake_stream):
    stream = fake_stream(struct.pack('>Q', 5), fail_on=["write"])
    with pytest.raises(TransportError):
        perform_handshake(Role.CONNECTOR, stream, entropy=lambda: CONNECTOR_PRIVATE)
    assert "read" not in stream.calls


def test_recv_public_read_failure_is_handshake_error(fake_stream):
    with pytest.raises(HandshakeError):
        recv_public(fake_stream(b"\x00" * 8, fail_on=["read"]))
