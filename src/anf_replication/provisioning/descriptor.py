"""Per-side resource descriptors and the workflow context that owns them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from anf_replication.config.models import (
    PollingConfig,
    ReplicationConfig,
    SharedConfig,
    SideConfig,
    SideRole,
    TopologyConfig,
)
from anf_replication.provisioning.errors import DescriptorError
from anf_replication.provisioning.resource_ids import subnet_resource_id

_DERIVED_FIELDS = frozenset({"account_id", "pool_id", "volume_id"})


@dataclass
class ResourceDescriptor:
    """One side of the topology.

    Identity comes from ``config``; ``account_id``, ``pool_id`` and
    ``volume_id`` stay ``None`` until the matching creation call returns
    and may then be assigned exactly once.
    """

    role: SideRole
    config: SideConfig
    subnet_id: str
    account_id: str | None = None
    pool_id: str | None = None
    volume_id: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _DERIVED_FIELDS and getattr(self, name, None) is not None:
            msg = f"{self.role} {name} is already set to {getattr(self, name)}"
            raise DescriptorError(msg)
        super().__setattr__(name, value)

    @property
    def label(self) -> str:
        return self.role.value.capitalize()

    @property
    def location(self) -> str:
        return self.config.location

    @property
    def resource_group(self) -> str:
        return self.config.resource_group

    @property
    def account_name(self) -> str:
        return self.config.account_name

    @property
    def pool_name(self) -> str:
        return self.config.pool_name

    @property
    def volume_name(self) -> str:
        return self.config.volume_name

    @classmethod
    def from_config(
        cls, role: SideRole, config: SideConfig, subscription_id: str
    ) -> ResourceDescriptor:
        assert config.vnet_resource_group is not None
        return cls(
            role=role,
            config=config,
            subnet_id=subnet_resource_id(
                subscription_id,
                config.vnet_resource_group,
                config.vnet_name,
                config.subnet_name,
            ),
        )


@dataclass
class WorkflowContext:
    """Everything a provisioning or teardown run reads and mutates."""

    subscription_id: str
    primary: ResourceDescriptor
    secondary: ResourceDescriptor
    shared: SharedConfig = field(default_factory=SharedConfig)
    replication: ReplicationConfig = field(default_factory=ReplicationConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)

    @classmethod
    def from_config(
        cls, config: TopologyConfig, subscription_id: str
    ) -> WorkflowContext:
        return cls(
            subscription_id=subscription_id,
            primary=ResourceDescriptor.from_config(
                SideRole.PRIMARY, config.primary, subscription_id
            ),
            secondary=ResourceDescriptor.from_config(
                SideRole.SECONDARY, config.secondary, subscription_id
            ),
            shared=config.shared,
            replication=config.replication,
            polling=config.polling,
        )

    def sides(self, *, reverse: bool = False) -> list[ResourceDescriptor]:
        """Sides in creation order (primary first), or teardown order."""
        ordered = [self.primary, self.secondary]
        return ordered[::-1] if reverse else ordered
