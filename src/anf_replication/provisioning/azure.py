"""AzureNetAppFilesClient: StorageClient backed by the Azure management SDKs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from azure.core.exceptions import (
    AzureError,
    HttpResponseError,
    ResourceNotFoundError,
)

from anf_replication.config.models import SharedConfig
from anf_replication.provisioning import resource_ids
from anf_replication.provisioning.client import ReplicationSpec, ResourceState
from anf_replication.provisioning.descriptor import ResourceDescriptor
from anf_replication.provisioning.errors import (
    NotFoundError,
    ReplicationMissingError,
    StorageApiError,
)

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential

logger = structlog.get_logger()

REPLICATION_MISSING_CODE = "VolumeReplicationMissing"


def _error_code(exc: HttpResponseError) -> str | None:
    error = getattr(exc, "error", None)
    return getattr(error, "code", None)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map azure-core exceptions onto the StorageApiError taxonomy."""
    try:
        yield
    except ResourceNotFoundError as exc:
        if _error_code(exc) == REPLICATION_MISSING_CODE:
            raise ReplicationMissingError(str(exc), code=REPLICATION_MISSING_CODE) from exc
        raise NotFoundError(str(exc), code=_error_code(exc)) from exc
    except HttpResponseError as exc:
        code = _error_code(exc)
        if code == REPLICATION_MISSING_CODE or REPLICATION_MISSING_CODE in str(exc):
            raise ReplicationMissingError(str(exc), code=REPLICATION_MISSING_CODE) from exc
        raise StorageApiError(str(exc), code=code) from exc
    except AzureError as exc:
        # Transport failures (unreachable host, dropped connection).
        raise StorageApiError(str(exc)) from exc


class AzureNetAppFilesClient:
    """Thin blocking wrapper over ``azure-mgmt-netapp`` and ``azure-mgmt-resource``.

    Every long-running operation is awaited before returning, so callers
    observe the API as strictly sequential.
    """

    def __init__(self, netapp: Any, resources: Any) -> None:
        self._netapp = netapp
        self._resources = resources

    @classmethod
    def from_credential(
        cls, credential: TokenCredential, subscription_id: str
    ) -> AzureNetAppFilesClient:
        from azure.mgmt.netapp import NetAppManagementClient
        from azure.mgmt.resource import ResourceManagementClient

        return cls(
            NetAppManagementClient(credential, subscription_id),
            ResourceManagementClient(credential, subscription_id),
        )

    # -- Lookup ----------------------------------------------------------------

    def get_resource_by_id(self, resource_id: str, api_version: str) -> Any:
        with translate_errors():
            return self._resources.resources.get_by_id(resource_id, api_version)

    def get_resource(self, resource_id: str) -> ResourceState:
        kind = resource_ids.resource_kind(resource_id)
        rg = resource_ids.resource_group(resource_id)
        account = resource_ids.account_name(resource_id)
        with translate_errors():
            if kind == "volume":
                resource = self._netapp.volumes.get(
                    rg,
                    account,
                    resource_ids.pool_name(resource_id),
                    resource_ids.volume_name(resource_id),
                )
            elif kind == "pool":
                resource = self._netapp.pools.get(
                    rg, account, resource_ids.pool_name(resource_id)
                )
            else:
                resource = self._netapp.accounts.get(rg, account)
        return ResourceState(
            resource_id=resource_id,
            provisioning_state=getattr(resource, "provisioning_state", None),
        )

    def get_replication_status(self, volume_id: str) -> str:
        with translate_errors():
            status = self._netapp.volumes.replication_status(
                resource_ids.resource_group(volume_id),
                resource_ids.account_name(volume_id),
                resource_ids.pool_name(volume_id),
                resource_ids.volume_name(volume_id),
            )
        return str(status.mirror_state)

    # -- Create ----------------------------------------------------------------

    def create_account(self, side: ResourceDescriptor, shared: SharedConfig) -> str:
        from azure.mgmt.netapp.models import NetAppAccount

        body = NetAppAccount(location=side.location, tags=shared.tags)
        with translate_errors():
            account = self._netapp.accounts.begin_create_or_update(
                side.resource_group, side.account_name, body
            ).result()
        logger.info("azure.account_created", account_id=account.id)
        return str(account.id)

    def create_pool(self, side: ResourceDescriptor, shared: SharedConfig) -> str:
        from azure.mgmt.netapp.models import CapacityPool

        body = CapacityPool(
            location=side.location,
            service_level=side.config.service_level.value,
            size=shared.capacity_pool_size_bytes,
            tags=shared.tags,
        )
        with translate_errors():
            pool = self._netapp.pools.begin_create_or_update(
                side.resource_group, side.account_name, side.pool_name, body
            ).result()
        logger.info("azure.pool_created", pool_id=pool.id)
        return str(pool.id)

    def create_volume(
        self,
        side: ResourceDescriptor,
        shared: SharedConfig,
        replication: ReplicationSpec | None = None,
    ) -> str:
        from azure.mgmt.netapp.models import (
            ExportPolicyRule,
            ReplicationObject,
            Volume,
            VolumePropertiesDataProtection,
            VolumePropertiesExportPolicy,
        )

        protocols = set(shared.protocol_types)
        export_policy = VolumePropertiesExportPolicy(
            rules=[
                ExportPolicyRule(
                    rule_index=1,
                    allowed_clients="0.0.0.0/0",
                    cifs="CIFS" in protocols,
                    nfsv3="NFSv3" in protocols,
                    nfsv41="NFSv4.1" in protocols,
                    unix_read_only=False,
                    unix_read_write=True,
                )
            ]
        )
        data_protection = None
        if replication is not None:
            data_protection = VolumePropertiesDataProtection(
                replication=ReplicationObject(
                    endpoint_type=replication.endpoint_type,
                    remote_volume_region=replication.remote_volume_region,
                    remote_volume_resource_id=replication.remote_volume_id,
                    replication_schedule=replication.schedule.value,
                )
            )
        body = Volume(
            location=side.location,
            creation_token=side.volume_name,
            service_level=side.config.service_level.value,
            usage_threshold=shared.volume_size_bytes,
            subnet_id=side.subnet_id,
            protocol_types=list(shared.protocol_types),
            export_policy=export_policy,
            data_protection=data_protection,
            tags=shared.tags,
        )
        with translate_errors():
            volume = self._netapp.volumes.begin_create_or_update(
                side.resource_group,
                side.account_name,
                side.pool_name,
                side.volume_name,
                body,
            ).result()
        logger.info("azure.volume_created", volume_id=volume.id)
        return str(volume.id)

    # -- Replication -----------------------------------------------------------

    def authorize_replication(
        self, side: ResourceDescriptor, remote_volume_id: str
    ) -> None:
        from azure.mgmt.netapp.models import AuthorizeRequest

        with translate_errors():
            self._netapp.volumes.begin_authorize_replication(
                side.resource_group,
                side.account_name,
                side.pool_name,
                side.volume_name,
                AuthorizeRequest(remote_volume_resource_id=remote_volume_id),
            ).wait()

    def break_replication(self, side: ResourceDescriptor) -> None:
        with translate_errors():
            self._netapp.volumes.begin_break_replication(
                side.resource_group, side.account_name, side.pool_name, side.volume_name
            ).wait()

    def delete_replication(self, side: ResourceDescriptor) -> None:
        with translate_errors():
            self._netapp.volumes.begin_delete_replication(
                side.resource_group, side.account_name, side.pool_name, side.volume_name
            ).wait()

    # -- Delete ----------------------------------------------------------------

    def delete_volume(self, side: ResourceDescriptor) -> None:
        with translate_errors():
            self._netapp.volumes.begin_delete(
                side.resource_group, side.account_name, side.pool_name, side.volume_name
            ).wait()

    def delete_pool(self, side: ResourceDescriptor) -> None:
        with translate_errors():
            self._netapp.pools.begin_delete(
                side.resource_group, side.account_name, side.pool_name
            ).wait()

    def delete_account(self, side: ResourceDescriptor) -> None:
        with translate_errors():
            self._netapp.accounts.begin_delete(
                side.resource_group, side.account_name
            ).wait()
