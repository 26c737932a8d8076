"""Protocol constants for the CV-X non-procedural Ethernet interface."""

from enum import Enum, IntEnum

# Framing
CR = 0x0D  # frame terminator (sentinel)
TERMINATOR = bytes([CR])
FIELD_SEPARATOR = ","
SEPARATORS = (",", "\r")  # configured in Network Settings >> Non-Procedural

# Error replies start with this marker: ER,<tag>,<code>
ERROR_TAG = "ER"

# Receive buffer size for one reply frame
MAX_FRAME_SIZE = 1024

# Connection defaults (vendor sample values)
DEFAULT_HOST = "192.168.0.10"
DEFAULT_PORT = 8500
DEFAULT_TIMEOUT_MS = 2000


class Tag(str, Enum):
    """Command tags. Success replies echo the tag as their first field."""
    READ_RUN_SETUP_MODE = "RM"
    SET_RUN_MODE = "R0"
    READ_PROGRAM = "PR"
    CHANGE_PROGRAM = "PW"
    READ_EXEC_NO = "EXR"
    WRITE_EXEC_NO = "EXW"
    RESET = "RS"
    TRIGGER = "TA"
    IMAGE_REGISTRATION = "BS"


class ResponseCode(IntEnum):
    """Outcome of a controller call.

    OK and the error values mirror the controller's numeric codes. TIMEOUT is
    never sent by the controller; the client reports it when no reply arrives.
    UNKNOWN_ERROR stands for any other controller code (kept on the Reply).
    """
    OK = 0
    COMMAND_ERROR = 2
    COMMAND_DISABLED = 3
    PARAMETER_ERROR = 22
    TIMEOUT = 99
    UNKNOWN_ERROR = -1


# Controller error codes that map onto a named ResponseCode
CONTROLLER_ERRORS = {
    ResponseCode.COMMAND_ERROR.value: ResponseCode.COMMAND_ERROR,
    ResponseCode.COMMAND_DISABLED.value: ResponseCode.COMMAND_DISABLED,
    ResponseCode.PARAMETER_ERROR.value: ResponseCode.PARAMETER_ERROR,
}

# Argument ranges accepted by the controller
SDCARD_RANGE = (1, 2)
PROGRAM_RANGE = (0, 999)
EXEC_NO_RANGE = (0, 99)
CAMERA_RANGE = (1, 4)
REFERENCE_RANGE = (0, 999)
