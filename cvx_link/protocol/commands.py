"""Command builders for the CV-X non-procedural protocol.

All commands are ASCII text, fields separated by commas and terminated
with CR (0x0D). Commands only run in Run Mode unless noted otherwise.
"""

from .constants import (
    CAMERA_RANGE,
    EXEC_NO_RANGE,
    FIELD_SEPARATOR,
    PROGRAM_RANGE,
    REFERENCE_RANGE,
    SDCARD_RANGE,
    TERMINATOR,
    Tag,
)


def encode(tag: Tag, *args: str) -> bytes:
    """Build a command: tag + comma-joined args + CR."""
    fields = [tag.value, *args]
    return FIELD_SEPARATOR.join(fields).encode("ascii") + TERMINATOR


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be {low}-{high}, got {value}")


def build_read_run_setup_mode() -> bytes:
    """Build RM command to query run/setup mode.

    Reply: RM,n CR (0 = setup, 1 = run). Works in both modes.
    """
    return encode(Tag.READ_RUN_SETUP_MODE)


def build_set_run_mode() -> bytes:
    """Build R0 command to switch the controller to run mode."""
    return encode(Tag.SET_RUN_MODE)


def build_read_program() -> bytes:
    """Build PR command to read the current program.

    Reply: PR,d,nnn CR (d = SD card 1-2, nnn = program 0-999).
    """
    return encode(Tag.READ_PROGRAM)


def build_change_program(sdcard: int, program: int) -> bytes:
    """Build PW command to switch program.

    Format: PW,d,nnn CR with the program number zero-padded to 3 digits.
    """
    _check_range("SD card number", sdcard, SDCARD_RANGE)
    _check_range("Program number", program, PROGRAM_RANGE)
    return encode(Tag.CHANGE_PROGRAM, str(sdcard), f"{program:03d}")


def build_read_exec_no() -> bytes:
    """Build EXR command to read the execution condition number (0-99)."""
    return encode(Tag.READ_EXEC_NO)


def build_write_exec_no(exec_no: int) -> bytes:
    """Build EXW command to set the execution condition number.

    Format: EXW,n CR
    """
    _check_range("Execution condition number", exec_no, EXEC_NO_RANGE)
    return encode(Tag.WRITE_EXEC_NO, str(exec_no))


def build_reset() -> bytes:
    """Build RS command to reset the current program."""
    return encode(Tag.RESET)


def build_trigger() -> bytes:
    """Build TA command to trigger all cameras.

    The controller acknowledges with TA CR, then sends the result data
    configured under Output >> Ethernet (Non-procedural) as a second frame.
    """
    return encode(Tag.TRIGGER)


def build_image_registration(camera: int, reference: int) -> bytes:
    """Build BS command to save the current image as a reference image.

    Format: BS,c,nnn CR (c = camera 1-4, nnn = reference image 0-999).
    """
    _check_range("Camera number", camera, CAMERA_RANGE)
    _check_range("Reference image number", reference, REFERENCE_RANGE)
    return encode(Tag.IMAGE_REGISTRATION, str(camera), f"{reference:03d}")
