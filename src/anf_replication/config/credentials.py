"""Service principal auth file → Azure credential."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

if TYPE_CHECKING:
    from azure.core.credentials import TokenCredential

AUTH_LOCATION_ENV = "AZURE_AUTH_LOCATION"


class AzureAuthInfo(BaseModel):
    """Contents of the file written by ``az ad sp create-for-rbac --sdk-auth``.

    Only the four fields needed for a client-secret credential are read;
    endpoint URLs and other keys in the file are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(alias="clientId")
    client_secret: SecretStr = Field(alias="clientSecret")
    subscription_id: str = Field(alias="subscriptionId")
    tenant_id: str = Field(alias="tenantId")


def load_auth_info(path: str | Path | None = None) -> AzureAuthInfo:
    """Read the auth file at *path*, or at ``$AZURE_AUTH_LOCATION`` when omitted."""
    if path is None:
        path = os.environ.get(AUTH_LOCATION_ENV)
        if not path:
            msg = f"No auth file given and {AUTH_LOCATION_ENV} is not set"
            raise ValueError(msg)
    p = Path(path)
    if not p.exists():
        msg = f"Auth file not found: {p}"
        raise FileNotFoundError(msg)
    try:
        return AzureAuthInfo.model_validate_json(p.read_text())
    except ValidationError as exc:
        msg = f"Invalid auth file ({p}):\n{exc}"
        raise ValueError(msg) from exc


def build_credential(info: AzureAuthInfo) -> TokenCredential:
    """Create a client-secret credential for the service principal."""
    from azure.identity import ClientSecretCredential

    return ClientSecretCredential(
        tenant_id=info.tenant_id,
        client_id=info.client_id,
        client_secret=info.client_secret.get_secret_value(),
    )
