"""Fixed-interval readiness polling over a StorageClient.

One generic routine, ``wait_for``, drives every wait in the workflows.
What it waits *for* is expressed as a small tagged condition:

- ``ReadyExists``       the resource exists with provisioning state Succeeded
- ``ReplicationReady``  the volume's replication status can be read
- ``MirrorState``       the replication reports a specific mirror state
- ``Gone``              the resource (or its replication) is not found

A "not found" answer is an observation, never an error: it is success for
``Gone`` and simply "not yet" for the others.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from anf_replication.provisioning.client import SUCCEEDED, StorageClient
from anf_replication.provisioning.errors import NotFoundError, PollTimeoutError

logger = structlog.get_logger()

NOT_FOUND = "NotFound"


@dataclass(frozen=True)
class ReadyExists:
    def __str__(self) -> str:
        return "ready"


@dataclass(frozen=True)
class ReplicationReady:
    def __str__(self) -> str:
        return "replication ready"


@dataclass(frozen=True)
class MirrorState:
    state: str

    def __str__(self) -> str:
        return f"mirror state {self.state}"


@dataclass(frozen=True)
class Gone:
    replication: bool = False

    def __str__(self) -> str:
        return "replication removed" if self.replication else "removed"


WaitCondition = ReadyExists | ReplicationReady | MirrorState | Gone


@dataclass(frozen=True)
class Observation:
    met: bool
    state: str


def observe(
    client: StorageClient, resource_id: str, condition: WaitCondition
) -> Observation:
    """Fetch the resource once and evaluate *condition* against it."""
    replication_probe = isinstance(condition, ReplicationReady | MirrorState) or (
        isinstance(condition, Gone) and condition.replication
    )
    try:
        if replication_probe:
            state = client.get_replication_status(resource_id)
        else:
            state = str(client.get_resource(resource_id).provisioning_state)
    except NotFoundError:
        return Observation(met=isinstance(condition, Gone), state=NOT_FOUND)

    if isinstance(condition, ReadyExists):
        return Observation(met=state == SUCCEEDED, state=state)
    if isinstance(condition, ReplicationReady):
        return Observation(met=True, state=state)
    if isinstance(condition, MirrorState):
        return Observation(met=state == condition.state, state=state)
    return Observation(met=False, state=state)


def wait_for(
    client: StorageClient,
    resource_id: str,
    condition: WaitCondition,
    *,
    retries: int,
    interval_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Poll until *condition* holds, returning the last observed state.

    Makes at most ``retries`` fetches, sleeping ``interval_seconds``
    between them. Raises ``PollTimeoutError`` when the budget runs out;
    client errors other than "not found" propagate unchanged.
    """

    def _log_wait(retry_state: RetryCallState) -> None:
        obs = retry_state.outcome.result() if retry_state.outcome else None
        logger.debug(
            "poll.waiting",
            resource_id=resource_id,
            condition=str(condition),
            attempt=retry_state.attempt_number,
            state=obs.state if obs else None,
        )

    def _timeout(retry_state: RetryCallState) -> Observation:
        assert retry_state.outcome is not None
        last = retry_state.outcome.result()
        raise PollTimeoutError(
            resource_id, condition, retry_state.attempt_number, last.state
        )

    retrying = Retrying(
        stop=stop_after_attempt(retries),
        wait=wait_fixed(interval_seconds),
        retry=retry_if_result(lambda obs: not obs.met),
        sleep=sleep,
        before_sleep=_log_wait,
        retry_error_callback=_timeout,
    )
    obs = retrying(observe, client, resource_id, condition)
    logger.info(
        "poll.condition_met",
        resource_id=resource_id,
        condition=str(condition),
        state=obs.state,
    )
    return obs.state
