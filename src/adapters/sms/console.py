"""
Console code dispatcher adapter - Implements CodeDispatcher protocol.

This module provides a console-based implementation of the domain's
code dispatcher port, logging passcode requests instead of sending SMS.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleCodeDispatcher:
    """
    Implements CodeDispatcher protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    No message is sent; the request is only logged at INFO level.
    """

    def send_code(self, phone_number: str) -> None:
        """
        Log a one-time passcode request (simulates SMS delivery).

        Args:
            phone_number: Full international number (dial code + digits)
        """
        logger.info("[OTP] Code requested for: %s", phone_number)
