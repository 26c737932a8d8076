"""Tests for the check sequence."""

from cvx_link.protocol.constants import ResponseCode
from cvx_link.sequence import prepare_controller, run_check


class TestPrepareController:
    def test_already_in_target_state(self, client, fake_serial):
        fake_serial.queue(b"RM,1\r", b"PR,1,000\r", b"EXR,0\r", b"RS\r")
        reply = prepare_controller(client, sdcard=1, program=0, exec_no=0)
        assert reply.ok
        assert fake_serial.written == [b"RM\r", b"PR\r", b"EXR\r", b"RS\r"]

    def test_sets_everything_that_differs(self, client, fake_serial):
        fake_serial.queue(
            b"RM,0\r", b"R0\r",
            b"PR,2,004\r", b"PW\r",
            b"EXR,3\r", b"EXW\r",
            b"RS\r",
        )
        reply = prepare_controller(client, sdcard=1, program=12, exec_no=7)
        assert reply.ok
        assert fake_serial.written == [
            b"RM\r", b"R0\r",
            b"PR\r", b"PW,1,012\r",
            b"EXR\r", b"EXW,7\r",
            b"RS\r",
        ]

    def test_stops_at_first_failure(self, client, fake_serial):
        fake_serial.queue(b"RM,1\r", b"PR,1,000\r", b"ER,EXR,03\r")
        reply = prepare_controller(client, sdcard=1, program=0, exec_no=0)
        assert reply.code == ResponseCode.COMMAND_DISABLED
        assert fake_serial.written == [b"RM\r", b"PR\r", b"EXR\r"]

    def test_timeout_propagates(self, client, fake_serial):
        reply = prepare_controller(client, sdcard=1, program=0, exec_no=0)
        assert reply.code == ResponseCode.TIMEOUT


class TestRunCheck:
    def test_returns_trigger_data(self, client, fake_serial):
        fake_serial.queue(
            b"RM,1\r", b"PR,1,000\r", b"EXR,0\r", b"RS\r",
            b"TA\r", b"0.125,42,\r",
        )
        reply = run_check(client, sdcard=1, program=0, exec_no=0)
        assert reply.ok
        assert reply.value == [0.125, 42.0]

    def test_no_trigger_after_failed_preparation(self, client, fake_serial):
        fake_serial.queue(b"RM,1\r", b"PR,1,000\r", b"EXR,0\r", b"ER,RS,02\r")
        reply = run_check(client, sdcard=1, program=0, exec_no=0)
        assert reply.code == ResponseCode.COMMAND_ERROR
        assert b"TA\r" not in fake_serial.written
