"""Protocol layer: command builders, reply parsing, TCP port and controller client."""

from .constants import ResponseCode, Tag
from .controller import ControllerClient
from .replies import ProgramSelection, ProtocolError, Reply
