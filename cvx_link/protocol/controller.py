"""High-level client for the CV-X controller.

Runs one command at a time over the TCP port: encode, send, read the reply
frame, then decode it into a Reply. The controller handles a single
outstanding request, so every exchange (including the trigger's second read)
holds the I/O lock.
"""

import logging
import threading
from typing import Optional

import serial

from .commands import (
    build_change_program,
    build_image_registration,
    build_read_exec_no,
    build_read_program,
    build_read_run_setup_mode,
    build_reset,
    build_set_run_mode,
    build_trigger,
    build_write_exec_no,
)
from .constants import DEFAULT_PORT, DEFAULT_TIMEOUT_MS, ResponseCode, Tag
from .replies import (
    PayloadDecoder,
    Reply,
    decode_exec_no,
    decode_measurements,
    decode_program,
    decode_run_mode,
    parse_reply,
)
from .tcp_port import TcpPort

logger = logging.getLogger(__name__)


class ControllerClient:
    """CV-X controller client over the non-procedural Ethernet protocol.

    Usage::

        client = ControllerClient()
        if client.connect("192.168.0.10", 8500, 2000):
            reply = client.trigger()
            client.release()

    Each operation returns a Reply. Timeouts and ER replies come back as
    status codes; malformed frames raise ProtocolError.
    """

    def __init__(self) -> None:
        self._port: Optional[TcpPort] = None
        self._io_lock = threading.RLock()

    @property
    def connected(self) -> bool:
        return self._port is not None and self._port.is_open

    # ---- connection lifecycle ----

    def connect(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> bool:
        """Open the connection. ``timeout_ms`` bounds every reply read.

        ``timeout_ms`` does not apply to establishing the connection: pyserial's
        socket:// handler waits up to its own fixed 5 s for the TCP connect.

        Returns False if the controller cannot be reached or the address is
        invalid. An existing connection is released first.
        """
        with self._io_lock:
            self.release()
            tcp = TcpPort(host, port, timeout_ms / 1000.0)
            try:
                tcp.open()
            except (serial.SerialException, ValueError, OSError) as e:
                logger.warning("Could not connect to %s:%s: %s", host, port, e)
                return False
            self._port = tcp
            return True

    def release(self) -> None:
        """Close the connection. No-op if never connected or already released."""
        with self._io_lock:
            if self._port is None:
                return
            try:
                self._port.close()
            except (serial.SerialException, OSError) as e:
                logger.warning("Error closing connection: %s", e)
            finally:
                self._port = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    # ---- request/response core ----

    def _require_port(self) -> TcpPort:
        if self._port is None:
            raise RuntimeError("Not connected to controller. Call connect() first.")
        return self._port

    def _read_frame(self, request: Optional[bytes] = None) -> Optional[bytes]:
        """Send ``request`` (if given) and read one frame.

        Returns None when nothing arrived before the timeout or the link
        failed mid-exchange.
        """
        port = self._require_port()
        try:
            if request is None:
                frame = port.receive_frame()
            else:
                frame = port.send_and_receive(request)
        except (serial.SerialException, OSError) as e:
            logger.warning("Link error during exchange: %s", e)
            return None
        if not frame:
            logger.warning("Timeout waiting for controller reply")
            return None
        return frame

    def _execute(
        self,
        tag: Tag,
        request: bytes,
        decoder: Optional[PayloadDecoder] = None,
    ) -> Reply:
        """Send one command and decode its reply."""
        with self._io_lock:
            frame = self._read_frame(request)
            if frame is None:
                return Reply(code=ResponseCode.TIMEOUT)
            reply = parse_reply(frame, tag, decoder)

        if reply.error_code is not None:
            logger.warning(
                "%s rejected: %s (code %s)", tag.value, reply.code.name, reply.error_code,
            )
        return reply

    # ---- operations ----

    def read_run_setup_mode(self) -> Reply:
        """RM: value is True in run mode, False in setup mode. Works in both modes."""
        return self._execute(Tag.READ_RUN_SETUP_MODE, build_read_run_setup_mode(), decode_run_mode)

    def set_run_mode(self) -> Reply:
        """R0: switch to run mode. Works in both modes."""
        return self._execute(Tag.SET_RUN_MODE, build_set_run_mode())

    def read_program(self) -> Reply:
        """PR: value is a ProgramSelection. Run mode only."""
        return self._execute(Tag.READ_PROGRAM, build_read_program(), decode_program)

    def change_program(self, sdcard: int, program: int) -> Reply:
        """PW: load ``program`` (0-999) from ``sdcard`` (1-2). Run mode only."""
        return self._execute(Tag.CHANGE_PROGRAM, build_change_program(sdcard, program))

    def read_exec_no(self) -> Reply:
        """EXR: value is the execution condition number. Run mode only."""
        return self._execute(Tag.READ_EXEC_NO, build_read_exec_no(), decode_exec_no)

    def write_exec_no(self, exec_no: int) -> Reply:
        """EXW: set the execution condition number (0-99). Run mode only."""
        return self._execute(Tag.WRITE_EXEC_NO, build_write_exec_no(exec_no))

    def reset(self) -> Reply:
        """RS: reset the current program. Run mode only."""
        return self._execute(Tag.RESET, build_reset())

    def trigger(self) -> Reply:
        """TA: trigger the cameras and fetch the result data.

        The controller first echoes TA, then sends the configured output
        values in a second frame. Value is the list of floats. If the data
        frame does not arrive in time, or stops before its terminator, the reply
        is TIMEOUT with no value. A data frame longer than the receive buffer
        raises ProtocolError.
        """
        with self._io_lock:
            ack = self._execute(Tag.TRIGGER, build_trigger())
            if not ack.ok:
                return ack

            data = self._read_frame()
            if data is None:
                logger.warning("No trigger data after acknowledgement")
                return Reply(code=ResponseCode.TIMEOUT)
            values = decode_measurements(data)

        logger.debug("Trigger data: %s", values)
        return Reply(code=ResponseCode.OK, value=values)

    def image_registration(self, camera: int, reference: int) -> Reply:
        """BS: save the current image of ``camera`` (1-4) as reference ``reference`` (0-999)."""
        return self._execute(
            Tag.IMAGE_REGISTRATION, build_image_registration(camera, reference),
        )
