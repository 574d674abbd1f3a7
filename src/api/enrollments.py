"""
In-memory registry of open enrollments.

Each phone sign-up is driven by its own EnrollmentStateMachine, addressed
by an opaque id. Drafts are never persisted; a restart discards them.

An enrollment untouched for longer than the idle TTL is closed and evicted
the next time the registry is used, so abandoned sign-ups do not pile up.
"""

import logging
import time
import uuid
from collections.abc import Callable

from src.domain.enrollment_machine import EnrollmentStateMachine

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TTL_SECONDS = 1800.0


class EnrollmentRegistry:
    """Owns the state machines of all open enrollments."""

    def __init__(
        self,
        idle_ttl_seconds: float = DEFAULT_IDLE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._machines: dict[str, EnrollmentStateMachine] = {}
        self._last_used: dict[str, float] = {}

    def __len__(self) -> int:
        self._evict_idle()
        return len(self._machines)

    def open(self, machine: EnrollmentStateMachine) -> str:
        """Register a machine and return its enrollment id."""
        self._evict_idle()
        enrollment_id = uuid.uuid4().hex
        self._machines[enrollment_id] = machine
        self._last_used[enrollment_id] = self._clock()
        logger.info("Enrollment started: %s", enrollment_id)
        return enrollment_id

    def get(self, enrollment_id: str) -> EnrollmentStateMachine | None:
        """Look up an open enrollment and mark it as used."""
        self._evict_idle()
        machine = self._machines.get(enrollment_id)
        if machine is None or machine.is_closed:
            return None
        self._last_used[enrollment_id] = self._clock()
        return machine

    def discard(self, enrollment_id: str) -> None:
        """Close and forget an enrollment. Unknown ids are ignored."""
        self._last_used.pop(enrollment_id, None)
        machine = self._machines.pop(enrollment_id, None)
        if machine is not None:
            machine.close()

    def close_all(self) -> None:
        for machine in self._machines.values():
            machine.close()
        if self._machines:
            logger.info("Closed %d open enrollment(s)", len(self._machines))
        self._machines.clear()
        self._last_used.clear()

    def _evict_idle(self) -> None:
        deadline = self._clock() - self._idle_ttl_seconds
        expired = [eid for eid, used in self._last_used.items() if used <= deadline]
        for enrollment_id in expired:
            self.discard(enrollment_id)
        if expired:
            logger.info("Evicted %d idle enrollment(s)", len(expired))
