"""ReplicationProvisioner: ordered bring-up and teardown of a CRR topology."""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from anf_replication.config.models import SideRole
from anf_replication.provisioning.client import ReplicationSpec, StorageClient
from anf_replication.provisioning.descriptor import (
    ResourceDescriptor,
    WorkflowContext,
)
from anf_replication.provisioning.errors import (
    DescriptorError,
    NotFoundError,
    PollTimeoutError,
    ReplicationMissingError,
    ResourceCreationError,
    StorageApiError,
    SubnetLookupError,
    SubnetNotFoundError,
    TeardownError,
)
from anf_replication.provisioning.poller import (
    Gone,
    MirrorState,
    ReadyExists,
    ReplicationReady,
    WaitCondition,
    wait_for,
)

logger = structlog.get_logger()

VIRTUAL_NETWORKS_API_VERSION = "2019-09-01"
MIRRORED = "Mirrored"
BROKEN = "Broken"


class ReplicationProvisioner:
    """Creates primary and secondary resources, then wires and authorizes CRR.

    Both workflows are strictly sequential and fail fast: the first error
    aborts the run and leaves whatever already exists in place.
    """

    def __init__(
        self,
        client: StorageClient,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._sleep = sleep

    def _wait(
        self, ctx: WorkflowContext, resource_id: str, condition: WaitCondition
    ) -> str:
        return wait_for(
            self._client,
            resource_id,
            condition,
            retries=ctx.polling.retries,
            interval_seconds=ctx.polling.interval_seconds,
            sleep=self._sleep,
        )

    # -- Provision -------------------------------------------------------------

    def provision(self, ctx: WorkflowContext) -> None:
        for side in ctx.sides():
            logger.info("provision.side_started", side=side.label)
            self._verify_subnet(side)
            self._create_side(ctx, side)

        primary, secondary = ctx.primary, ctx.secondary
        assert primary.volume_id is not None and secondary.volume_id is not None

        logger.info(
            "replication.authorizing",
            source=primary.volume_id,
            destination=secondary.volume_id,
        )
        try:
            self._client.authorize_replication(primary, secondary.volume_id)
        except StorageApiError as exc:
            raise ResourceCreationError(
                primary.label, "replication authorization", exc
            ) from exc

        logger.info("replication.waiting_ready", volume_id=primary.volume_id)
        self._wait(ctx, primary.volume_id, ReplicationReady())
        logger.info("provision.completed")

    def _verify_subnet(self, side: ResourceDescriptor) -> None:
        logger.info("subnet.checking", side=side.label, subnet_id=side.subnet_id)
        try:
            self._client.get_resource_by_id(
                side.subnet_id, VIRTUAL_NETWORKS_API_VERSION
            )
        except NotFoundError as exc:
            raise SubnetNotFoundError(side.label, side.subnet_id, exc) from exc
        except StorageApiError as exc:
            raise SubnetLookupError(side.label, side.subnet_id, exc) from exc

    def _create_side(self, ctx: WorkflowContext, side: ResourceDescriptor) -> None:
        try:
            side.account_id = self._client.create_account(side, ctx.shared)
        except StorageApiError as exc:
            raise ResourceCreationError(side.label, "account", exc) from exc
        logger.info("account.created", side=side.label, account_id=side.account_id)

        try:
            side.pool_id = self._client.create_pool(side, ctx.shared)
        except StorageApiError as exc:
            raise ResourceCreationError(side.label, "capacity pool", exc) from exc
        logger.info("pool.created", side=side.label, pool_id=side.pool_id)

        replication = None
        if side.role == SideRole.SECONDARY:
            replication = self._replication_spec(ctx)
            logger.info(
                "volume.data_protection",
                side=side.label,
                remote_volume_id=replication.remote_volume_id,
            )
        try:
            side.volume_id = self._client.create_volume(
                side, ctx.shared, replication
            )
        except StorageApiError as exc:
            raise ResourceCreationError(side.label, "volume", exc) from exc
        logger.info("volume.created", side=side.label, volume_id=side.volume_id)

        logger.info("volume.waiting_ready", side=side.label)
        self._wait(ctx, side.volume_id, ReadyExists())

    def _replication_spec(self, ctx: WorkflowContext) -> ReplicationSpec:
        primary = ctx.primary
        if primary.volume_id is None:
            msg = "secondary volume requires the primary volume id to be populated"
            raise DescriptorError(msg)
        return ReplicationSpec(
            remote_volume_id=primary.volume_id,
            remote_volume_region=primary.location,
            schedule=ctx.replication.schedule,
        )

    # -- Teardown --------------------------------------------------------------

    def teardown(self, ctx: WorkflowContext) -> None:
        """Unwind in reverse: replication first, then volume, pool, account.

        Sides or resources whose id was never populated are skipped.
        """
        for side in ctx.sides(reverse=True):
            if side.role == SideRole.SECONDARY and side.volume_id is not None:
                self._remove_replication(ctx, side)
            self._remove_side(ctx, side)
        logger.info("teardown.completed")

    def _remove_replication(
        self, ctx: WorkflowContext, side: ResourceDescriptor
    ) -> None:
        assert side.volume_id is not None
        volume_id = side.volume_id

        self._teardown_wait(ctx, side, volume_id, MirrorState(MIRRORED))
        logger.info("teardown.breaking_replication", volume=side.volume_name)
        try:
            self._client.break_replication(side)
        except StorageApiError as exc:
            raise TeardownError(side.label, "breaking replication", exc) from exc

        self._teardown_wait(ctx, side, volume_id, MirrorState(BROKEN))
        logger.info("teardown.deleting_replication", volume=side.volume_name)
        try:
            self._client.delete_replication(side)
        except ReplicationMissingError:
            logger.info("teardown.replication_already_missing", volume=side.volume_name)
        except StorageApiError as exc:
            raise TeardownError(side.label, "deleting replication", exc) from exc

        self._teardown_wait(ctx, side, volume_id, Gone(replication=True))
        logger.info("teardown.replication_deleted", volume=side.volume_name)

    def _remove_side(self, ctx: WorkflowContext, side: ResourceDescriptor) -> None:
        if side.volume_id is not None:
            logger.info("teardown.deleting_volume", volume_id=side.volume_id)
            try:
                self._client.delete_volume(side)
            except StorageApiError as exc:
                raise TeardownError(side.label, "deleting volume", exc) from exc
            self._teardown_wait(ctx, side, side.volume_id, Gone())
            logger.info("teardown.volume_deleted", volume_id=side.volume_id)

        if side.pool_id is not None:
            logger.info("teardown.deleting_pool", pool_id=side.pool_id)
            try:
                self._client.delete_pool(side)
            except StorageApiError as exc:
                raise TeardownError(side.label, "deleting capacity pool", exc) from exc
            self._teardown_wait(ctx, side, side.pool_id, Gone())
            logger.info("teardown.pool_deleted", pool_id=side.pool_id)

        if side.account_id is not None:
            logger.info("teardown.deleting_account", account_id=side.account_id)
            try:
                self._client.delete_account(side)
            except StorageApiError as exc:
                raise TeardownError(side.label, "deleting account", exc) from exc
            logger.info("teardown.account_deleted", account_id=side.account_id)

    def _teardown_wait(
        self,
        ctx: WorkflowContext,
        side: ResourceDescriptor,
        resource_id: str,
        condition: WaitCondition,
    ) -> None:
        try:
            self._wait(ctx, resource_id, condition)
        except (PollTimeoutError, StorageApiError) as exc:
            raise TeardownError(side.label, f"waiting for {condition}", exc) from exc
