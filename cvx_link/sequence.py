"""Check sequence: bring the controller to a known state, then trigger.

Only setting commands whose read-back differs from the target are sent.
The sequence stops at the first call that does not return OK.
"""

import logging

from .protocol.constants import ResponseCode
from .protocol.controller import ControllerClient
from .protocol.replies import ProgramSelection, Reply

logger = logging.getLogger(__name__)


def prepare_controller(
    client: ControllerClient,
    sdcard: int,
    program: int,
    exec_no: int,
) -> Reply:
    """Ensure run mode, program and execution condition, then reset.

    Returns an OK Reply, or the first failing Reply.
    """
    mode = client.read_run_setup_mode()
    if not mode.ok:
        return mode
    if not mode.value:
        logger.info("Controller in setup mode, switching to run mode")
        reply = client.set_run_mode()
        if not reply.ok:
            return reply

    current = client.read_program()
    if not current.ok:
        return current
    target = ProgramSelection(sdcard=sdcard, program=program)
    if current.value != target:
        logger.info(
            "Changing program %s -> SD%d program %03d", current.value, sdcard, program,
        )
        reply = client.change_program(sdcard, program)
        if not reply.ok:
            return reply

    current_exec = client.read_exec_no()
    if not current_exec.ok:
        return current_exec
    if current_exec.value != exec_no:
        logger.info("Changing execution condition %d -> %d", current_exec.value, exec_no)
        reply = client.write_exec_no(exec_no)
        if not reply.ok:
            return reply

    reply = client.reset()
    if not reply.ok:
        return reply
    return Reply(code=ResponseCode.OK)


def run_check(
    client: ControllerClient,
    sdcard: int,
    program: int,
    exec_no: int,
) -> Reply:
    """Prepare the controller and trigger one inspection.

    Returns the trigger Reply (measurements in ``value``) or the Reply of
    the preparation step that failed.
    """
    reply = prepare_controller(client, sdcard, program, exec_no)
    if not reply.ok:
        logger.error("Preparation failed: %s", reply.code.name)
        return reply
    return client.trigger()
