"""Top-level driver: provision, optionally clean up, report an exit status."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from anf_replication.config.models import TopologyConfig
from anf_replication.provisioning.client import StorageClient
from anf_replication.provisioning.descriptor import WorkflowContext
from anf_replication.provisioning.errors import ProvisioningError, StorageApiError
from anf_replication.provisioning.workflow import ReplicationProvisioner

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass
class RunResult:
    exit_code: int
    context: WorkflowContext
    cleaned_up: bool = False
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_OK


def run_replication(
    config: TopologyConfig,
    client: StorageClient,
    subscription_id: str,
    *,
    cleanup: bool | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Run the provisioning workflow and, when enabled, the teardown workflow.

    ``cleanup`` overrides ``config.cleanup`` when given. A provisioning
    failure always disables cleanup: the cause is unknown, so nothing is
    deleted automatically.
    """
    ctx = WorkflowContext.from_config(config, subscription_id)
    provisioner = ReplicationProvisioner(client, sleep=sleep)
    should_clean_up = config.cleanup if cleanup is None else cleanup
    result = RunResult(exit_code=EXIT_OK, context=ctx)

    try:
        provisioner.provision(ctx)
    except (ProvisioningError, StorageApiError) as exc:
        logger.error("run.provision_failed", error=str(exc))
        result.exit_code = EXIT_FAILURE
        result.error = exc
        should_clean_up = False

    if not should_clean_up:
        logger.info("run.cleanup_skipped")
        return result

    logger.info("run.cleanup_started")
    try:
        provisioner.teardown(ctx)
        result.cleaned_up = True
    except ProvisioningError as exc:
        logger.error("run.cleanup_failed", error=str(exc))
        result.exit_code = EXIT_FAILURE
        result.error = exc
    return result
