"""Tests for the TCP port wrapper."""

import pytest

from cvx_link.protocol.constants import MAX_FRAME_SIZE
from cvx_link.protocol.replies import ProtocolError
from cvx_link.protocol.tcp_port import TcpPort, build_socket_url


class TestSocketUrl:
    def test_ipv4(self):
        assert build_socket_url("192.168.0.10", 8500) == "socket://192.168.0.10:8500"

    def test_hostname(self):
        assert build_socket_url("cvx.local", 8500) == "socket://cvx.local:8500"

    def test_ipv6_bracketed(self):
        assert build_socket_url("fe80::1", 8500) == "socket://[fe80::1]:8500"
        assert build_socket_url("[::1]", 8500) == "socket://[::1]:8500"


class TestTcpPort:
    def test_open_passes_timeout(self, fake_serial):
        port = TcpPort("10.0.0.2", 9000, timeout=0.5)
        port.open()
        assert port.is_open
        assert fake_serial.url == "socket://10.0.0.2:9000"
        assert fake_serial.kwargs["timeout"] == 0.5
        assert fake_serial.kwargs["write_timeout"] == 0.5

    def test_close_is_idempotent(self, fake_serial):
        port = TcpPort("10.0.0.2")
        port.open()
        port.close()
        port.close()
        assert not port.is_open
        assert not fake_serial.is_open

    def test_close_without_open(self):
        TcpPort("10.0.0.2").close()

    def test_send_requires_open(self):
        with pytest.raises(RuntimeError):
            TcpPort("10.0.0.2").send(b"RS\r")

    def test_receive_requires_open(self):
        with pytest.raises(RuntimeError):
            TcpPort("10.0.0.2").receive_frame()

    def test_send_and_receive(self, fake_serial):
        fake_serial.queue(b"RS\r")
        with TcpPort("10.0.0.2") as port:
            assert port.send_and_receive(b"RS\r") == b"RS\r"
        assert fake_serial.written == [b"RS\r"]
        assert fake_serial.resets == 1
        assert fake_serial.read_sizes == [MAX_FRAME_SIZE]
        assert not fake_serial.is_open

    def test_receive_timeout_returns_empty(self, fake_serial):
        with TcpPort("10.0.0.2") as port:
            assert port.receive_frame() == b""

    def test_unterminated_frame_counts_as_timeout(self, fake_serial):
        fake_serial.queue(b"12.50,3.0")
        with TcpPort("10.0.0.2") as port:
            assert port.receive_frame() == b""

    def test_buffer_filled_without_terminator_raises(self, fake_serial):
        fake_serial.queue(b"1" * MAX_FRAME_SIZE)
        with TcpPort("10.0.0.2") as port:
            with pytest.raises(ProtocolError, match="exceeds"):
                port.receive_frame()

    def test_frame_of_exactly_max_size_with_terminator(self, fake_serial):
        frame = b"1" * (MAX_FRAME_SIZE - 1) + b"\r"
        fake_serial.queue(frame)
        with TcpPort("10.0.0.2") as port:
            assert port.receive_frame() == frame
