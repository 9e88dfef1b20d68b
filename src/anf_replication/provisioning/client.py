"""StorageClient protocol: the remote provisioning API the workflows call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from anf_replication.config.models import ReplicationSchedule, SharedConfig
from anf_replication.provisioning.descriptor import ResourceDescriptor

# Provisioning state reported by ARM once a create/update has settled.
SUCCEEDED = "Succeeded"


@dataclass(frozen=True)
class ResourceState:
    resource_id: str
    provisioning_state: str | None


@dataclass(frozen=True)
class ReplicationSpec:
    """Replication object attached to a destination volume's create request."""

    remote_volume_id: str
    remote_volume_region: str
    schedule: ReplicationSchedule
    endpoint_type: str = "dst"


@runtime_checkable
class StorageClient(Protocol):
    """Blocking create/get/delete calls against the storage API.

    Implementations raise ``NotFoundError`` (or its subclass
    ``ReplicationMissingError``) for absent resources and
    ``StorageApiError`` for every other rejected call.
    """

    def get_resource_by_id(self, resource_id: str, api_version: str) -> Any: ...

    def create_account(
        self, side: ResourceDescriptor, shared: SharedConfig
    ) -> str: ...

    def create_pool(self, side: ResourceDescriptor, shared: SharedConfig) -> str: ...

    def create_volume(
        self,
        side: ResourceDescriptor,
        shared: SharedConfig,
        replication: ReplicationSpec | None = None,
    ) -> str: ...

    def get_resource(self, resource_id: str) -> ResourceState: ...

    def get_replication_status(self, volume_id: str) -> str:
        """Return the mirror state of the volume's replication."""
        ...

    def authorize_replication(
        self, side: ResourceDescriptor, remote_volume_id: str
    ) -> None: ...

    def break_replication(self, side: ResourceDescriptor) -> None: ...

    def delete_replication(self, side: ResourceDescriptor) -> None: ...

    def delete_volume(self, side: ResourceDescriptor) -> None: ...

    def delete_pool(self, side: ResourceDescriptor) -> None: ...

    def delete_account(self, side: ResourceDescriptor) -> None: ...
