"""Bounded polling of an asynchronous recognition job.

The loop is a small state machine::

    submitted -> polling -> succeeded | failed | timed_out

Each status query is preceded by a fixed delay. ``notStarted`` and
``running`` keep the job polling, ``succeeded`` ends it with the payload,
and any other status ends it with :class:`RecognitionFailed`. Running out
of attempts raises :class:`RecognitionTimeout`.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from ocrpro.errors import RecognitionFailed, RecognitionTimeout
from ocrpro.utils.logger import get_logger

logger = get_logger(__name__)

PENDING_STATUSES = frozenset({"notStarted", "running"})
SUCCEEDED_STATUS = "succeeded"


class StatusSource(Protocol):
    def get_status(self, handle: str) -> dict[str, Any]: ...


class JobState(StrEnum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED, JobState.TIMED_OUT)


def next_state(vendor_status: str | None) -> JobState:
    """Map a vendor status string onto the poller's state."""
    if vendor_status in PENDING_STATUSES:
        return JobState.POLLING
    if vendor_status == SUCCEEDED_STATUS:
        return JobState.SUCCEEDED
    return JobState.FAILED


@dataclass
class PollOutcome:
    """Result of a finished poll sequence."""

    payload: dict[str, Any]
    attempts: int


class JobPoller:
    """Polls one job handle until it reaches a terminal state.

    Args:
        source: Object exposing ``get_status(handle)``.
        max_attempts: Upper bound on status queries.
        interval: Seconds to wait before each query.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        source: StatusSource,
        max_attempts: int = 120,
        interval: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.source = source
        self.max_attempts = max_attempts
        self.interval = interval
        self._sleep = sleep

    def wait(self, handle: str) -> PollOutcome:
        """Poll ``handle`` until it succeeds, fails or runs out of attempts.

        Returns:
            The succeeded payload and the number of queries it took.

        Raises:
            RecognitionFailed: The job ended in a non-success status.
            RecognitionTimeout: ``max_attempts`` queries all came back pending.
        """
        state = JobState.SUBMITTED
        attempts = 0

        while not state.terminal:
            if attempts >= self.max_attempts:
                state = JobState.TIMED_OUT
                break

            self._sleep(self.interval)
            attempts += 1
            payload = self.source.get_status(handle)
            status = payload.get("status")
            state = next_state(status)
            logger.debug("Job poll %d/%d: %s", attempts, self.max_attempts, status)

        if state is JobState.SUCCEEDED:
            logger.info("OCR job succeeded after %d polls", attempts)
            return PollOutcome(payload=payload, attempts=attempts)
        if state is JobState.FAILED:
            logger.warning("OCR job ended with status %s", status)
            raise RecognitionFailed(str(status))

        logger.warning("OCR job still pending after %d polls", attempts)
        raise RecognitionTimeout(attempts)
