"""Azure resource id construction and parsing."""

from __future__ import annotations


def subnet_resource_id(
    subscription_id: str, vnet_resource_group: str, vnet_name: str, subnet_name: str
) -> str:
    """Build the fully-qualified resource id of a delegated subnet."""
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{vnet_resource_group}"
        f"/providers/Microsoft.Network/virtualNetworks/{vnet_name}"
        f"/subnets/{subnet_name}"
    )


def _segment(resource_id: str, key: str) -> str | None:
    """Return the path segment following *key* (case-insensitive), if any."""
    parts = resource_id.strip("/").split("/")
    lowered = [p.lower() for p in parts]
    try:
        idx = lowered.index(key.lower())
    except ValueError:
        return None
    if idx + 1 >= len(parts):
        return None
    return parts[idx + 1]


def resource_group(resource_id: str) -> str | None:
    return _segment(resource_id, "resourceGroups")


def account_name(resource_id: str) -> str | None:
    return _segment(resource_id, "netAppAccounts")


def pool_name(resource_id: str) -> str | None:
    return _segment(resource_id, "capacityPools")


def volume_name(resource_id: str) -> str | None:
    return _segment(resource_id, "volumes")


def resource_kind(resource_id: str) -> str:
    """Classify an ANF resource id as ``volume``, ``pool`` or ``account``.

    The deepest recognised segment wins, so a volume id (which also
    contains a pool and an account segment) is a ``volume``.
    """
    if volume_name(resource_id) is not None:
        return "volume"
    if pool_name(resource_id) is not None:
        return "pool"
    if account_name(resource_id) is not None:
        return "account"
    msg = f"Not an Azure NetApp Files resource id: {resource_id}"
    raise ValueError(msg)
