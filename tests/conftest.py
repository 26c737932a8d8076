"""Shared fixtures: a scripted stand-in for pyserial's socket port."""

import pytest
import serial

from cvx_link.protocol.controller import ControllerClient


class FakeSerial:
    """Replays queued reply frames; records everything written.

    Each read_until() call returns the next queued item, or b"" (timeout)
    once the queue is empty. Queued exceptions are raised instead.
    """

    def __init__(self):
        self.url = None
        self.kwargs = {}
        self.is_open = False
        self.written: list[bytes] = []
        self.replies: list = []
        self.resets = 0
        self.read_sizes: list = []

    def queue(self, *replies) -> None:
        self.replies.extend(replies)

    def write(self, data: bytes) -> int:
        self.written.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def reset_input_buffer(self) -> None:
        self.resets += 1

    def read_until(self, expected=b"\n", size=None) -> bytes:
        self.read_sizes.append(size)
        if not self.replies:
            return b""
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self) -> None:
        self.is_open = False


@pytest.fixture
def fake_serial(monkeypatch):
    fake = FakeSerial()

    def serial_for_url(url, **kwargs):
        fake.url = url
        fake.kwargs = kwargs
        fake.is_open = True
        return fake

    monkeypatch.setattr(serial, "serial_for_url", serial_for_url)
    return fake


@pytest.fixture
def client(fake_serial):
    c = ControllerClient()
    assert c.connect("192.168.0.10", 8500, 2000)
    yield c
    c.release()
