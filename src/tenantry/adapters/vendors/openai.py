"""OpenAI vendor adapter."""

from __future__ import annotations

from typing import Any

from tenantry.adapters.vendors.base import BaseVendorAdapter, descriptors
from tenantry.adapters.vendors.registry import register_vendor
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor

# The OpenAI listing also returns moderation, image and legacy completion
# models; only ids containing one of these are kept.
RELEVANT_KEYWORDS = ("gpt", "embedding", "tts", "whisper")

RECOMMENDED = descriptors(
    [
        ("gpt-4.1", "gpt-4.1", ModelCategory.LLM),
        ("gpt-4.1-mini", "gpt-4.1-mini", ModelCategory.LLM),
        ("gpt-4o", "gpt-4o", ModelCategory.LLM),
        ("gpt-4o-mini", "gpt-4o-mini", ModelCategory.LLM),
        ("text-embedding-3-small", "text-embedding-3-small", ModelCategory.EMBEDDING),
        ("text-embedding-3-large", "text-embedding-3-large", ModelCategory.EMBEDDING),
        ("tts-1", "tts-1", ModelCategory.TTS),
        ("whisper-1", "whisper-1", ModelCategory.SPEECH_TO_TEXT),
    ]
)


@register_vendor("openai")
class OpenAIAdapter(BaseVendorAdapter):
    """OpenAI platform models.

    Config:
        api_key: OpenAI API key.
        base_url: Optional override, e.g. an Azure or proxy endpoint.
    """

    default_base_url = "https://api.openai.com/v1"
    category_rules = (
        (ModelCategory.EMBEDDING, ("embedding",)),
        (ModelCategory.TTS, ("tts",)),
        (ModelCategory.SPEECH_TO_TEXT, ("whisper",)),
    )

    def recommended_models(self) -> list[ModelDescriptor]:
        return list(RECOMMENDED)

    def _parse_models(self, payload: Any) -> list[ModelDescriptor]:
        models = []
        for model in payload.get("data") or []:
            model_id = model.get("id") or ""
            if not any(keyword in model_id for keyword in RELEVANT_KEYWORDS):
                continue
            models.append(
                ModelDescriptor(
                    id=model_id,
                    display_name=model_id,
                    category=self.resolve_category(model_id),
                )
            )
        return models
