"""Shared fixtures: a recording in-memory StorageClient and topology builders."""

from __future__ import annotations

from typing import Any

import pytest

from anf_replication.config.loader import build_topology_config
from anf_replication.config.models import SharedConfig, TopologyConfig
from anf_replication.provisioning.client import (
    SUCCEEDED,
    ReplicationSpec,
    ResourceState,
)
from anf_replication.provisioning.descriptor import (
    ResourceDescriptor,
    WorkflowContext,
)
from anf_replication.provisioning.errors import (
    NotFoundError,
    ReplicationMissingError,
)

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000001"


class FakeStorageClient:
    """In-memory stand-in for the ANF API that records every call.

    ``calls`` holds ``(operation, target)`` tuples in issue order, where
    *target* is the side label for mutating calls and the resource id for
    reads. ``failures`` maps ``(operation, side_label)`` to the exception
    that call should raise.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.subnet_errors: dict[str, Exception] = {}
        self.volume_requests: list[tuple[str, ReplicationSpec | None]] = []
        self.existing: set[str] = set()
        self.mirror: dict[str, str] = {}
        self.replication_pairs: dict[str, str] = {}

    def _maybe_fail(self, op: str, side: ResourceDescriptor) -> None:
        self.calls.append((op, side.label))
        exc = self.failures.get((op, side.label))
        if exc is not None:
            raise exc

    @staticmethod
    def _account_id(side: ResourceDescriptor) -> str:
        return (
            f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{side.resource_group}"
            f"/providers/Microsoft.NetApp/netAppAccounts/{side.account_name}"
        )

    # -- StorageClient ---------------------------------------------------------

    def get_resource_by_id(self, resource_id: str, api_version: str) -> Any:
        self.calls.append(("get_subnet", resource_id))
        exc = self.subnet_errors.get(resource_id)
        if exc is not None:
            raise exc
        return {"id": resource_id}

    def create_account(self, side: ResourceDescriptor, shared: SharedConfig) -> str:
        self._maybe_fail("create_account", side)
        rid = self._account_id(side)
        self.existing.add(rid)
        return rid

    def create_pool(self, side: ResourceDescriptor, shared: SharedConfig) -> str:
        self._maybe_fail("create_pool", side)
        rid = f"{self._account_id(side)}/capacityPools/{side.pool_name}"
        self.existing.add(rid)
        return rid

    def create_volume(
        self,
        side: ResourceDescriptor,
        shared: SharedConfig,
        replication: ReplicationSpec | None = None,
    ) -> str:
        self._maybe_fail("create_volume", side)
        rid = (
            f"{self._account_id(side)}/capacityPools/{side.pool_name}"
            f"/volumes/{side.volume_name}"
        )
        self.volume_requests.append((side.label, replication))
        self.existing.add(rid)
        if replication is not None:
            self.mirror[rid] = "Uninitialized"
            self.replication_pairs[rid] = replication.remote_volume_id
        return rid

    def get_resource(self, resource_id: str) -> ResourceState:
        self.calls.append(("get_resource", resource_id))
        if resource_id not in self.existing:
            raise NotFoundError(f"{resource_id} not found")
        return ResourceState(resource_id, SUCCEEDED)

    def get_replication_status(self, volume_id: str) -> str:
        self.calls.append(("replication_status", volume_id))
        if volume_id not in self.mirror:
            raise ReplicationMissingError(f"{volume_id} has no replication")
        return self.mirror[volume_id]

    def authorize_replication(
        self, side: ResourceDescriptor, remote_volume_id: str
    ) -> None:
        self._maybe_fail("authorize_replication", side)
        self.mirror[remote_volume_id] = "Mirrored"
        assert side.volume_id is not None
        self.mirror[side.volume_id] = "Mirrored"

    def break_replication(self, side: ResourceDescriptor) -> None:
        self._maybe_fail("break_replication", side)
        assert side.volume_id is not None
        self.mirror[side.volume_id] = "Broken"

    def delete_replication(self, side: ResourceDescriptor) -> None:
        self._maybe_fail("delete_replication", side)
        assert side.volume_id is not None
        if side.volume_id not in self.mirror:
            raise ReplicationMissingError("VolumeReplicationMissing")
        del self.mirror[side.volume_id]
        remote = self.replication_pairs.pop(side.volume_id, None)
        if remote is not None:
            self.mirror.pop(remote, None)

    def delete_volume(self, side: ResourceDescriptor) -> None:
        self._maybe_fail("delete_volume", side)
        self.existing.discard(side.volume_id or "")

    def delete_pool(self, side: ResourceDescriptor) -> None:
        self._maybe_fail("delete_pool", side)
        self.existing.discard(side.pool_id or "")

    def delete_account(self, side: ResourceDescriptor) -> None:
        self._maybe_fail("delete_account", side)
        self.existing.discard(side.account_id or "")

    # -- Helpers ---------------------------------------------------------------

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]


@pytest.fixture
def fake_client() -> FakeStorageClient:
    return FakeStorageClient()


@pytest.fixture
def topology() -> TopologyConfig:
    return build_topology_config({"polling": {"interval_seconds": 0, "retries": 3}})


@pytest.fixture
def ctx(topology: TopologyConfig) -> WorkflowContext:
    return WorkflowContext.from_config(topology, SUBSCRIPTION_ID)
