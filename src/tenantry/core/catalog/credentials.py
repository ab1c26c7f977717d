"""Vendor credential store."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from tenantry.core.catalog.interfaces import Cipher, VendorResolver
from tenantry.core.catalog.repository import CatalogRepository
from tenantry.core.catalog.types import CredentialSummary
from tenantry.core.exceptions import (
    CredentialNotFound,
    DecryptionError,
    InvalidCredential,
    VendorNotSupported,
)

if TYPE_CHECKING:
    from tenantry.core.catalog.reconciler import CatalogReconciler

logger = structlog.get_logger()


def decode_config(cipher: Cipher, token: str) -> dict[str, Any]:
    """Decrypt a stored credential back into its config mapping.

    Raises:
        DecryptionError: If the token cannot be decrypted or is not a JSON object.
    """
    plaintext = cipher.decrypt(token)
    try:
        config = json.loads(plaintext)
    except json.JSONDecodeError as e:
        raise DecryptionError("Stored credential is not valid JSON") from e
    if not isinstance(config, dict):
        raise DecryptionError("Stored credential is not a JSON object")
    return config


class CredentialStore:
    """Stores per-tenant vendor configuration encrypted at rest.

    A credential is only persisted after the vendor accepted it, and every
    successful save triggers a reconciliation so the catalog reflects the
    new key at once.
    """

    def __init__(
        self,
        repo: CatalogRepository,
        cipher: Cipher,
        vendors: VendorResolver,
        reconciler: CatalogReconciler,
    ) -> None:
        self._repo = repo
        self._cipher = cipher
        self._vendors = vendors
        self._reconciler = reconciler

    async def list_credentials_summary(self, tenant_id: UUID) -> list[CredentialSummary]:
        """Configured vendors with their validity. Secrets are never included."""
        credentials = await self._repo.list_credentials(tenant_id)
        return [
            CredentialSummary(
                vendor=c.vendor,
                is_valid=c.is_valid,
                last_validated_at=c.last_validated_at,
            )
            for c in credentials
        ]

    async def save_credential(
        self, tenant_id: UUID, vendor: str, config: dict[str, Any]
    ) -> dict[str, bool]:
        """Validate, encrypt and store a vendor config, then reconcile.

        Nothing is written when validation fails.

        Raises:
            VendorNotSupported: If vendor has no adapter.
            InvalidCredential: If the vendor rejected the config.
        """
        adapter = self._vendors.get(vendor)
        if adapter is None:
            raise VendorNotSupported(f"Vendor '{vendor}' is not supported")

        if not await adapter.validate(config):
            logger.info("credential_rejected", tenant_id=str(tenant_id), vendor=vendor)
            raise InvalidCredential(vendor, f"{vendor} rejected the supplied credentials")

        encrypted = self._cipher.encrypt(json.dumps(config))
        await self._repo.upsert_credential(tenant_id, vendor, encrypted)
        logger.info("credential_saved", tenant_id=str(tenant_id), vendor=vendor)

        # The credential is committed; a failed refresh is retried on the next read.
        try:
            await self._reconciler.reconcile(tenant_id)
        except Exception:
            logger.error(
                "credential_reconcile_failed",
                tenant_id=str(tenant_id),
                vendor=vendor,
                exc_info=True,
            )
        return {"success": True}

    async def delete_credential(self, tenant_id: UUID, vendor: str) -> None:
        """Remove a credential together with the vendor's catalog and bindings.

        Raises:
            CredentialNotFound: If no credential is stored for vendor.
        """
        if not await self._repo.delete_credential(tenant_id, vendor):
            raise CredentialNotFound(f"No credentials configured for {vendor}")
        logger.info("credential_deleted", tenant_id=str(tenant_id), vendor=vendor)

    async def get_decrypted_config(self, tenant_id: UUID, vendor: str) -> dict[str, Any]:
        """Plaintext config for an internal consumer such as the chat runtime.

        Raises:
            CredentialNotFound: If no credential is stored for vendor.
            DecryptionError: If the stored value cannot be decrypted.
        """
        credential = await self._repo.get_credential(tenant_id, vendor)
        if credential is None:
            raise CredentialNotFound(f"No credentials configured for {vendor}")
        return decode_config(self._cipher, credential.encrypted_config)
