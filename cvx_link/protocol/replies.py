"""Reply frame parsing for the CV-X non-procedural protocol.

A reply is one CR-terminated ASCII frame whose fields are separated by
commas. The first field decides how the rest is read:

- the echoed command tag: success, remaining fields are the payload
- ``ER``: error reply ``ER,<tag>,<code>``

Trigger results arrive in a separate data frame of decimal values
(``.`` as decimal point) with a trailing comma: ``12.50,3.00,-1.75,\\r``.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .constants import CONTROLLER_ERRORS, ERROR_TAG, SEPARATORS, ResponseCode, Tag

_SPLIT_RE = re.compile("[" + re.escape("".join(SEPARATORS)) + "]")

PayloadDecoder = Callable[[list[str]], Any]


class ProtocolError(ValueError):
    """A reply frame that does not match the expected shape."""


@dataclass(frozen=True)
class ProgramSelection:
    """Active program as reported by PR."""
    sdcard: int
    program: int


@dataclass
class Reply:
    """Result of one controller call.

    ``value`` holds the decoded payload when ``code`` is OK. ``error_code``
    holds the raw number from an ER reply, so codes outside ResponseCode
    remain visible as UNKNOWN_ERROR.
    """
    code: ResponseCode
    value: Any = None
    error_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.code == ResponseCode.OK


def tokenize(frame: bytes) -> list[str]:
    """Split a frame on the field separators, dropping empty trailing fields."""
    tokens = _SPLIT_RE.split(frame.decode("ascii", errors="replace"))
    while tokens and tokens[-1] == "":
        tokens.pop()
    return tokens


def map_error_code(code: int) -> ResponseCode:
    """Map a controller error code to a ResponseCode (UNKNOWN_ERROR if unlisted)."""
    return CONTROLLER_ERRORS.get(code, ResponseCode.UNKNOWN_ERROR)


def _int_field(fields: list[str], index: int, name: str) -> int:
    if len(fields) <= index:
        raise ProtocolError(f"Missing {name} field in reply {fields!r}")
    try:
        return int(fields[index])
    except ValueError:
        raise ProtocolError(f"Invalid {name}: {fields[index]!r}") from None


def parse_error_reply(tokens: list[str], tag: Tag) -> Reply:
    """Parse ``ER,<tag>,<code>`` into an error Reply."""
    if len(tokens) < 3:
        raise ProtocolError(f"Truncated error reply to {tag.value}: {tokens!r}")
    if tokens[1] != tag.value:
        raise ProtocolError(
            f"Error reply for {tokens[1]!r} while waiting for {tag.value!r}"
        )
    code = _int_field(tokens, 2, "error code")
    return Reply(code=map_error_code(code), error_code=code)


def parse_reply(frame: bytes, tag: Tag, decoder: Optional[PayloadDecoder] = None) -> Reply:
    """Classify a reply frame and decode its payload.

    Args:
        frame: Raw reply bytes as received.
        tag: Tag of the command that was sent.
        decoder: Called with the fields after the tag on success. When
            omitted the reply carries no payload.

    Raises:
        ProtocolError: If the first field is neither the tag nor ER, or the
            fields do not fit the expected shape.
    """
    tokens = tokenize(frame)
    if not tokens:
        raise ProtocolError(f"Empty reply to {tag.value}")

    if tokens[0] == tag.value:
        value = decoder(tokens[1:]) if decoder is not None else None
        return Reply(code=ResponseCode.OK, value=value)

    if tokens[0] == ERROR_TAG:
        return parse_error_reply(tokens, tag)

    raise ProtocolError(f"Unexpected reply to {tag.value}: {frame!r}")


# --- Payload decoders ---

def decode_run_mode(fields: list[str]) -> bool:
    """RM,n: 1 = run mode, 0 = setup mode."""
    mode = _int_field(fields, 0, "mode")
    if mode not in (0, 1):
        raise ProtocolError(f"Invalid mode: {mode}")
    return mode == 1


def decode_program(fields: list[str]) -> ProgramSelection:
    """PR,d,nnn: SD card number and program number."""
    return ProgramSelection(
        sdcard=_int_field(fields, 0, "SD card number"),
        program=_int_field(fields, 1, "program number"),
    )


def decode_exec_no(fields: list[str]) -> int:
    """EXR,nn: execution condition number."""
    return _int_field(fields, 0, "execution condition number")


def decode_measurements(frame: bytes) -> list[float]:
    """Parse a trigger data frame into floats.

    Values always use ``.`` as the decimal point; the comma is the field
    separator, so parsing must not depend on the locale.
    """
    values = []
    for token in tokenize(frame):
        try:
            values.append(float(token))
        except ValueError:
            raise ProtocolError(f"Invalid measurement value: {token!r}") from None
    return values
