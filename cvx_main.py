#!/usr/bin/env python3
"""CV-X communication check.

Connects to the controller configured in CVX_* environment variables (or
.env), selects the target program and execution condition, triggers the
cameras once and logs the result data.

Start:  python cvx_main.py
"""

import logging
import sys

from cvx_link.config import settings
from cvx_link.protocol.constants import ResponseCode
from cvx_link.protocol.controller import ControllerClient
from cvx_link.sequence import run_check

logger = logging.getLogger("cvx.main")


def main() -> int:
    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s:     %(name)s - %(message)s",
    )
    logger.info("Connecting to CV-X at %s:%d...", settings.host, settings.port)

    with ControllerClient() as client:
        if not client.connect(settings.host, settings.port, settings.timeout_ms):
            logger.error("Couldn't connect to CV-X")
            return 1
        logger.info("Connected")

        reply = run_check(
            client,
            sdcard=settings.target_sdcard,
            program=settings.target_program,
            exec_no=settings.target_exec_no,
        )

    if reply.code == ResponseCode.TIMEOUT:
        logger.error("No data received")
        return 1
    if not reply.ok:
        logger.error("Check failed: %s (code %s)", reply.code.name, reply.error_code)
        return 1

    logger.info("Cameras triggered, %d values:", len(reply.value))
    for value in reply.value:
        logger.info("  %s", value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
