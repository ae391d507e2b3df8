import errno
import io

import pytest


class FakeStream:
    """In-memory duplex stream: reads from `incoming`, writes to `outgoing`, records call order.

    Methods named in `fail_on` raise ConnectionResetError instead.
    """

    def __init__(self, incoming: bytes = b"", fail_on=()):
        self.incoming = io.BytesIO(incoming)
        self.outgoing = io.BytesIO()
        self.fail_on = set(fail_on)
        self.calls = []
        self.closed = False

    def _call(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise ConnectionResetError(errno.ECONNRESET, "Connection reset by peer")

    def read(self, n=-1):
        self._call("read")
        return self.incoming.read(n)

    def readline(self):
        self._call("readline")
        return self.incoming.readline()

    def write(self, data):
        self._call("write")
        return self.outgoing.write(data)

    def flush(self):
        self._call("flush")

    def close(self):
        self.closed = True

    @property
    def sent(self) -> bytes:
        return self.outgoing.getvalue()


@pytest.fixture
def fake_stream():
    return FakeStream
