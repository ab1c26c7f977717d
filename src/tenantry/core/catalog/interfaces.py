"""Protocol interfaces for catalog collaborators.

The catalog core depends only on these protocols. Concrete vendor adapters
and the cipher live under tenantry.adapters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tenantry.core.catalog.types import ModelDescriptor


@runtime_checkable
class Cipher(Protocol):
    """Opaque symmetric encryption for stored credentials."""

    def encrypt(self, plaintext: str) -> str:
        """Encrypt text into an opaque token."""
        ...

    def decrypt(self, token: str) -> str:
        """Decrypt a token produced by encrypt.

        Raises:
            DecryptionError: If the token is malformed or the key is wrong.
        """
        ...


@runtime_checkable
class VendorAdapter(Protocol):
    """Capability interface every vendor adapter implements."""

    name: str

    async def validate(self, config: dict[str, Any]) -> bool:
        """Probe the vendor with config. Never raises."""
        ...

    async def fetch_models(self, config: dict[str, Any]) -> list[ModelDescriptor]:
        """Live listing merged with the recommended list.

        Raises:
            VendorUnreachable: If the listing endpoint failed or timed out.
            InvalidCredential: If the vendor rejected the config.
        """
        ...

    async def get_models(self, config: dict[str, Any]) -> list[ModelDescriptor]:
        """Best-effort listing, falling back to the recommended list."""
        ...

    def recommended_models(self) -> list[ModelDescriptor]:
        """Curated static list used when the live listing is unavailable."""
        ...


@runtime_checkable
class VendorResolver(Protocol):
    """Lookup of the closed set of vendor adapters by name."""

    def get(self, vendor: str) -> VendorAdapter | None:
        """Adapter for a vendor name, or None if unsupported."""
        ...

    def supported_vendors(self) -> list[str]:
        """Names of all registered vendors."""
        ...
