"""Anthropic vendor adapter backed by the official SDK."""

from __future__ import annotations

from typing import Any

import anthropic
import httpx

from tenantry.adapters.vendors.base import BaseVendorAdapter, descriptors
from tenantry.adapters.vendors.registry import register_vendor
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor
from tenantry.core.exceptions import InvalidCredential, VendorUnreachable

RECOMMENDED = descriptors(
    [
        ("claude-opus-4-20250514", "Claude Opus 4", ModelCategory.LLM),
        ("claude-sonnet-4-20250514", "Claude Sonnet 4", ModelCategory.LLM),
        ("claude-3-7-sonnet-20250219", "Claude Sonnet 3.7", ModelCategory.LLM),
        ("claude-3-5-haiku-20241022", "Claude Haiku 3.5", ModelCategory.LLM),
    ]
)


@register_vendor("anthropic")
class AnthropicAdapter(BaseVendorAdapter):
    """Anthropic Claude models. Every Claude model is a chat model.

    Config:
        api_key: Anthropic API key.
        base_url: Optional override.
    """

    default_base_url = "https://api.anthropic.com"

    def recommended_models(self) -> list[ModelDescriptor]:
        return list(RECOMMENDED)

    async def _list_raw(self, config: dict[str, Any]) -> Any:
        api_key = self.api_key(config)
        if not api_key:
            raise InvalidCredential(self.name, "API key is required")

        client: anthropic.AsyncAnthropic | None = None
        try:
            client = anthropic.AsyncAnthropic(
                api_key=api_key,
                base_url=self.base_url(config),
                timeout=self.timeout_seconds,
                max_retries=0,
            )
            return [
                {"id": model.id, "display_name": model.display_name}
                async for model in client.models.list(limit=100)
            ]
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise InvalidCredential(self.name, "anthropic rejected the API key") from e
        except anthropic.APIError as e:
            raise VendorUnreachable(self.name, f"anthropic request failed: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            raise VendorUnreachable(self.name, f"anthropic base URL is invalid: {e}") from e
        finally:
            if client is not None:
                await client.close()

    def _parse_models(self, payload: Any) -> list[ModelDescriptor]:
        return [
            ModelDescriptor(
                id=model["id"],
                display_name=model.get("display_name") or model["id"],
                category=ModelCategory.LLM,
            )
            for model in payload
            if model.get("id")
        ]
