"""Google Gemini vendor adapter."""

from __future__ import annotations

from typing import Any

from tenantry.adapters.vendors.base import BaseVendorAdapter, descriptors
from tenantry.adapters.vendors.registry import register_vendor
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor

RECOMMENDED = descriptors(
    [
        ("gemini-2.5-pro-preview-05-06", "Gemini 2.5 Pro Preview", ModelCategory.LLM),
        ("gemini-2.5-flash-preview-05-20", "Gemini 2.5 Flash Preview", ModelCategory.LLM),
        ("gemini-2.0-flash", "Gemini 2.0 Flash", ModelCategory.LLM),
        ("gemini-2.0-flash-lite", "Gemini 2.0 Flash Lite", ModelCategory.LLM),
        ("gemini-2.0-flash-thinking-exp", "Gemini 2.0 Flash Thinking", ModelCategory.LLM),
        ("gemini-1.5-pro", "Gemini 1.5 Pro", ModelCategory.LLM),
        ("gemini-1.5-pro-latest", "Gemini 1.5 Pro Latest", ModelCategory.LLM),
        ("gemini-1.5-flash", "Gemini 1.5 Flash", ModelCategory.LLM),
        ("gemini-1.5-flash-latest", "Gemini 1.5 Flash Latest", ModelCategory.LLM),
        ("gemini-1.5-flash-8b", "Gemini 1.5 Flash 8B", ModelCategory.LLM),
        ("text-embedding-004", "Text Embedding 004", ModelCategory.EMBEDDING),
        ("text-embedding-005", "Text Embedding 005", ModelCategory.EMBEDDING),
        ("embedding-001", "Embedding 001", ModelCategory.EMBEDDING),
    ]
)


@register_vendor("gemini")
class GeminiAdapter(BaseVendorAdapter):
    """Google Generative Language API.

    The key travels as a ``key`` query parameter rather than a header, and
    model names come back prefixed with ``models/``.

    Config:
        api_key: Google AI Studio key.
        base_url: Optional override of the v1beta endpoint.
    """

    default_base_url = "https://generativelanguage.googleapis.com/v1beta"
    category_rules = (
        (ModelCategory.EMBEDDING, ("embedding",)),
        (ModelCategory.SPEECH_TO_TEXT, ("speech",)),
    )

    def _headers(self, config: dict[str, Any]) -> dict[str, str]:
        return {}

    def _params(self, config: dict[str, Any]) -> dict[str, str]:
        return {"key": self.api_key(config) or ""}

    def recommended_models(self) -> list[ModelDescriptor]:
        return list(RECOMMENDED)

    def resolve_model_category(self, model: dict[str, Any]) -> ModelCategory:
        """Category from supported generation methods, then from the name."""
        methods = model.get("supportedGenerationMethods") or []
        if "embedContent" in methods:
            return ModelCategory.EMBEDDING
        if "speech" in methods:
            return ModelCategory.SPEECH_TO_TEXT
        return self.resolve_category(model.get("name") or "")

    def _parse_models(self, payload: Any) -> list[ModelDescriptor]:
        models = []
        for model in payload.get("models") or []:
            model_id = (model.get("name") or "").removeprefix("models/")
            if not model_id:
                continue
            models.append(
                ModelDescriptor(
                    id=model_id,
                    display_name=model.get("displayName") or model_id,
                    category=self.resolve_model_category(model),
                )
            )
        return models
