"""Pydantic configuration models for the replication topology."""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, field_validator, model_validator

# Service minimums: 4 TiB per capacity pool, 100 GiB per volume.
MIN_POOL_SIZE_BYTES = 4 * 1024**4
MIN_VOLUME_SIZE_BYTES = 100 * 1024**3


class SideRole(StrEnum):
    """Position of a side in the replication topology."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class ServiceLevel(StrEnum):
    """Capacity pool / volume service tiers."""

    STANDARD = "Standard"
    PREMIUM = "Premium"
    ULTRA = "Ultra"


class ReplicationSchedule(StrEnum):
    """Supported cross-region replication schedules."""

    TEN_MINUTELY = "_10minutely"
    HOURLY = "hourly"
    DAILY = "daily"


class SideConfig(BaseModel):
    """Static description of one side (primary or secondary) of the topology."""

    location: str
    resource_group: str
    # Defaults to resource_group when the vnet lives alongside the account.
    vnet_resource_group: str | None = None
    vnet_name: str
    subnet_name: str
    account_name: str
    pool_name: str
    volume_name: str
    service_level: ServiceLevel = ServiceLevel.STANDARD

    @model_validator(mode="after")
    def default_vnet_resource_group(self) -> Self:
        if self.vnet_resource_group is None:
            self.vnet_resource_group = self.resource_group
        return self


class SharedConfig(BaseModel):
    """Settings applied to both sides."""

    capacity_pool_size_bytes: int = Field(
        default=MIN_POOL_SIZE_BYTES, ge=MIN_POOL_SIZE_BYTES
    )
    volume_size_bytes: int = Field(
        default=MIN_VOLUME_SIZE_BYTES, ge=MIN_VOLUME_SIZE_BYTES
    )
    protocol_types: list[str] = Field(default_factory=lambda: ["NFSv3"])
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("protocol_types")
    @classmethod
    def validate_protocol_types(cls, v: list[str]) -> list[str]:
        allowed = {"NFSv3", "NFSv4.1", "CIFS"}
        if not v:
            msg = "protocol_types must name at least one protocol"
            raise ValueError(msg)
        for proto in v:
            if proto not in allowed:
                msg = f"Unsupported protocol type '{proto}' (allowed: {sorted(allowed)})"
                raise ValueError(msg)
        return v


class ReplicationConfig(BaseModel):
    """Replication link settings attached to the secondary volume."""

    schedule: ReplicationSchedule = ReplicationSchedule.HOURLY


class PollingConfig(BaseModel):
    """Fixed-interval readiness polling budget."""

    interval_seconds: float = Field(default=60.0, ge=0.0)
    retries: int = Field(default=50, ge=1)


class TopologyConfig(BaseModel, extra="forbid"):
    """Primary/secondary resources plus shared, replication and polling settings."""

    primary: SideConfig
    secondary: SideConfig
    shared: SharedConfig = SharedConfig()
    replication: ReplicationConfig = ReplicationConfig()
    polling: PollingConfig = PollingConfig()
    cleanup: bool = False

    @model_validator(mode="after")
    def check_distinct_sides(self) -> Self:
        """Both sides must not resolve to the same account."""
        p, s = self.primary, self.secondary
        if (
            p.resource_group == s.resource_group
            and p.account_name == s.account_name
        ):
            msg = (
                "primary and secondary must not share the same resource group "
                f"and account name ('{p.resource_group}/{p.account_name}')"
            )
            raise ValueError(msg)
        return self
