"""TCP port wrapper for CV-X controller communication.

Provides a thin abstraction over pyserial's ``socket://`` URL handler so the
controller link gets the same timeout-bounded read API as a serial line.
"""

import logging
from typing import Optional

import serial

from .constants import DEFAULT_PORT, MAX_FRAME_SIZE, TERMINATOR
from .replies import ProtocolError

logger = logging.getLogger(__name__)


def build_socket_url(host: str, port: int) -> str:
    """Build a pyserial ``socket://`` URL, bracketing IPv6 literals."""
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"socket://{host}:{port}"


class TcpPort:
    """Wrapper around a pyserial socket connection to the controller."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = 2.0,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._serial: Optional[serial.SerialBase] = None

    @property
    def url(self) -> str:
        return build_socket_url(self.host, self.port)

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        """Open the TCP connection.

        Raises serial.SerialException (or ValueError for a malformed URL) if
        the controller cannot be reached.
        """
        if self.is_open:
            return
        self._serial = serial.serial_for_url(
            self.url,
            timeout=self.timeout,
            write_timeout=self.timeout,
        )
        logger.info("Opened %s (timeout %.3fs)", self.url, self.timeout)

    def close(self) -> None:
        """Shut down and close the connection. Safe to call more than once."""
        if self._serial is not None:
            try:
                self._serial.close()
            finally:
                self._serial = None
                logger.info("Closed %s", self.url)

    def flush(self) -> None:
        """Discard any unread input left over from an earlier exchange."""
        if self._serial:
            self._serial.reset_input_buffer()

    def send(self, data: bytes) -> None:
        """Send a complete request frame."""
        if not self._serial:
            raise RuntimeError("TCP port not open")
        self._serial.write(data)
        self._serial.flush()
        logger.debug("TX: %r", data)

    def receive_frame(self, max_size: int = MAX_FRAME_SIZE) -> bytes:
        """Read one CR-terminated frame.

        Only a terminated frame is returned. Returns b"" if the read timeout
        expires first, including when part of a frame already arrived.

        Raises:
            ProtocolError: If ``max_size`` bytes arrive without a terminator.
        """
        if not self._serial:
            raise RuntimeError("TCP port not open")
        data = self._serial.read_until(TERMINATOR, max_size)
        logger.debug("RX: %r", data)
        if data.endswith(TERMINATOR):
            return data
        if len(data) >= max_size:
            raise ProtocolError(f"Frame exceeds {max_size} bytes without terminator")
        if data:
            logger.warning("Discarding incomplete frame after timeout: %r", data)
        return b""

    def send_and_receive(self, data: bytes, max_size: int = MAX_FRAME_SIZE) -> bytes:
        """Send a request and read its reply frame."""
        self.flush()
        self.send(data)
        return self.receive_frame(max_size)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
