"""Error taxonomy for provisioning, polling and teardown."""

from __future__ import annotations

from typing import Any


class StorageApiError(Exception):
    """Raised by a StorageClient when the remote API rejects a call."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class NotFoundError(StorageApiError):
    """The requested resource does not exist."""


class ReplicationMissingError(NotFoundError):
    """The volume carries no replication object."""


class ProvisioningError(Exception):
    """Base class for every error that aborts a workflow."""


class DescriptorError(ProvisioningError):
    """A resource descriptor was used out of order or mutated twice."""


class LookupFailure(ProvisioningError):
    """The subnet a side attaches to could not be verified."""

    def __init__(self, side: str, subnet_id: str, cause: Exception) -> None:
        self.side = side
        self.subnet_id = subnet_id
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        return f"{self.side} subnet {self.subnet_id} lookup failed: {self.cause}"


class SubnetNotFoundError(LookupFailure):
    def _describe(self) -> str:
        return f"{self.side} subnet {self.subnet_id} not found: {self.cause}"


class SubnetLookupError(LookupFailure):
    def _describe(self) -> str:
        return (
            f"an error occurred trying to check if {self.side} subnet "
            f"{self.subnet_id} exists: {self.cause}"
        )


class ResourceCreationError(ProvisioningError):
    """The remote API rejected a create/authorize request."""

    def __init__(self, side: str, resource: str, cause: Exception) -> None:
        self.side = side
        self.resource = resource
        self.cause = cause
        super().__init__(
            f"an error occurred while creating {side} {resource}: {cause}"
        )


class PollTimeoutError(ProvisioningError):
    """A readiness condition was not reached within the retry budget."""

    def __init__(
        self, resource_id: str, condition: Any, attempts: int, last_state: str
    ) -> None:
        self.resource_id = resource_id
        self.condition = condition
        self.attempts = attempts
        self.last_state = last_state
        super().__init__(
            f"{resource_id} did not reach {condition} after {attempts} "
            f"attempt(s); last observed state: {last_state}"
        )


class TeardownError(ProvisioningError):
    """A cleanup step failed; remaining resources need manual removal."""

    def __init__(self, side: str, step: str, cause: Exception) -> None:
        self.side = side
        self.step = step
        self.cause = cause
        super().__init__(f"an error occurred while {step} on {side}: {cause}")
