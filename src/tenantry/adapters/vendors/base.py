"""Base vendor adapter.

Vendor adapters list the models a vendor serves for a given configuration.
They are stateless: the decrypted config is passed to every call, so one
instance serves every tenant.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from tenantry.core.catalog.diff import dedupe_descriptors
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor
from tenantry.core.exceptions import InvalidCredential, VendorError, VendorUnreachable

logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 10.0

KeywordRules = Sequence[tuple[ModelCategory, Sequence[str]]]


class BaseVendorAdapter(ABC):
    """Shared listing, validation and fallback logic for vendor adapters.

    Subclasses provide the recommended list and the payload parser; most also
    override category_rules. Adapters whose vendor is not a plain
    GET <base_url>/models endpoint override _list_raw.

    Attributes:
        name: Registry key, also stored on catalog rows.
        default_base_url: Used when the config carries no base URL.
        category_rules: Ordered (category, keywords) pairs; first match wins.
    """

    name: str = ""
    default_base_url: str = ""
    category_rules: KeywordRules = ()

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        """Initialize the adapter.

        Args:
            timeout_seconds: Bound for each HTTP call to the vendor.
        """
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    def recommended_models(self) -> list[ModelDescriptor]:
        """Curated static list used when the live listing is unavailable."""
        ...

    @abstractmethod
    def _parse_models(self, payload: Any) -> list[ModelDescriptor]:
        """Turn the vendor's listing payload into descriptors."""
        ...

    @staticmethod
    def api_key(config: dict[str, Any]) -> str | None:
        """API key from a config, accepting either spelling."""
        value = config.get("api_key") or config.get("apiKey")
        return value.strip() if isinstance(value, str) and value.strip() else None

    def base_url(self, config: dict[str, Any]) -> str:
        value = config.get("base_url") or config.get("baseUrl")
        if not isinstance(value, str) or not value.strip():
            return self.default_base_url.rstrip("/")
        return value.strip().rstrip("/")

    def _headers(self, config: dict[str, Any]) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key(config)}"}

    def _params(self, config: dict[str, Any]) -> dict[str, str]:
        return {}

    def resolve_category(self, model_id: str) -> ModelCategory:
        """Infer a category from keywords in the model id, defaulting to llm."""
        lowered = model_id.lower()
        for category, keywords in self.category_rules:
            if any(keyword in lowered for keyword in keywords):
                return category
        return ModelCategory.LLM

    def merge_with_recommended(self, models: list[ModelDescriptor]) -> list[ModelDescriptor]:
        """Live models first, then recommended models the vendor did not list."""
        return dedupe_descriptors([*models, *self.recommended_models()])

    async def _list_raw(self, config: dict[str, Any]) -> Any:
        """Call the vendor's listing endpoint.

        Raises:
            InvalidCredential: If no API key is configured or the vendor
                answered 401/403.
            VendorUnreachable: On timeout, transport error, other non-2xx
                status or a non-JSON body.
        """
        if not self.api_key(config):
            raise InvalidCredential(self.name, "API key is required")

        url = f"{self.base_url(config)}/models"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    url,
                    headers=self._headers(config),
                    params=self._params(config),
                    timeout=self.timeout_seconds,
                )
        except httpx.TimeoutException as e:
            raise VendorUnreachable(self.name, f"{self.name} timed out") from e
        except httpx.RequestError as e:
            raise VendorUnreachable(self.name, f"{self.name} request failed: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            raise VendorUnreachable(self.name, f"{self.name} base URL is invalid: {e}") from e

        if response.status_code in (401, 403):
            raise InvalidCredential(self.name, f"{self.name} rejected the API key")
        if not response.is_success:
            raise VendorUnreachable(
                self.name, f"{self.name} returned HTTP {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise VendorUnreachable(self.name, f"{self.name} returned invalid JSON") from e

    async def validate(self, config: dict[str, Any]) -> bool:
        """Probe the listing endpoint. Never raises."""
        try:
            await self._list_raw(config)
        except VendorError as e:
            logger.info("vendor_validation_failed", vendor=self.name, error=str(e))
            return False
        return True

    async def fetch_models(self, config: dict[str, Any]) -> list[ModelDescriptor]:
        """Live listing merged with the recommended list.

        Raises:
            VendorUnreachable: If the listing failed or could not be parsed.
            InvalidCredential: If the vendor rejected the config.
        """
        payload = await self._list_raw(config)
        try:
            models = self._parse_models(payload)
        except (AttributeError, KeyError, TypeError) as e:
            raise VendorUnreachable(
                self.name, f"{self.name} returned an unexpected listing"
            ) from e
        return self.merge_with_recommended(models)

    async def get_models(self, config: dict[str, Any]) -> list[ModelDescriptor]:
        """Best-effort listing; the recommended list when the vendor fails."""
        if not self.api_key(config):
            return []
        try:
            return await self.fetch_models(config)
        except VendorError as e:
            logger.warning("vendor_models_fallback", vendor=self.name, error=str(e))
            return self.recommended_models()


def descriptors(rows: Sequence[tuple[str, str, ModelCategory]]) -> list[ModelDescriptor]:
    """Build descriptors from (id, display name, category) rows."""
    return [ModelDescriptor(id=i, display_name=n, category=c) for i, n, c in rows]
