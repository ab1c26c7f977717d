"""OpenRouter vendor adapter."""

from __future__ import annotations

from typing import Any

from tenantry.adapters.vendors.base import BaseVendorAdapter, descriptors
from tenantry.adapters.vendors.registry import register_vendor
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor

LLM = ModelCategory.LLM

RECOMMENDED = descriptors(
    [
        # Anthropic
        ("anthropic/claude-sonnet-4", "Claude Sonnet 4", LLM),
        ("anthropic/claude-4-opus", "Claude 4 Opus", LLM),
        ("anthropic/claude-3.7-sonnet", "Claude 3.7 Sonnet", LLM),
        ("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet", LLM),
        ("anthropic/claude-3.5-haiku", "Claude 3.5 Haiku", LLM),
        ("anthropic/claude-3-opus", "Claude 3 Opus", LLM),
        # Google
        ("google/gemini-2.5-pro-preview", "Gemini 2.5 Pro Preview", LLM),
        ("google/gemini-2.5-flash-preview", "Gemini 2.5 Flash Preview", LLM),
        ("google/gemini-2.0-flash", "Gemini 2.0 Flash", LLM),
        ("google/gemini-2.0-flash-thinking-exp", "Gemini 2.0 Flash Thinking", LLM),
        ("google/gemini-pro-1.5", "Gemini 1.5 Pro", LLM),
        ("google/gemini-flash-1.5", "Gemini 1.5 Flash", LLM),
        # OpenAI
        ("openai/gpt-4.1", "GPT-4.1", LLM),
        ("openai/gpt-4.1-mini", "GPT-4.1 Mini", LLM),
        ("openai/gpt-4.5-preview", "GPT-4.5 Preview", LLM),
        ("openai/gpt-4o", "GPT-4o", LLM),
        ("openai/gpt-4o-mini", "GPT-4o Mini", LLM),
        ("openai/o3-mini", "O3 Mini", LLM),
        ("openai/o1", "O1", LLM),
        ("openai/o1-mini", "O1 Mini", LLM),
        # DeepSeek
        ("deepseek/deepseek-r1", "DeepSeek R1", LLM),
        ("deepseek/deepseek-chat", "DeepSeek Chat (V3)", LLM),
        ("deepseek/deepseek-coder", "DeepSeek Coder", LLM),
        # Meta
        ("meta-llama/llama-4-maverick", "Llama 4 Maverick", LLM),
        ("meta-llama/llama-4-scout", "Llama 4 Scout", LLM),
        ("meta-llama/llama-3.3-70b-instruct", "Llama 3.3 70B Instruct", LLM),
        ("meta-llama/llama-3.1-405b-instruct", "Llama 3.1 405B Instruct", LLM),
        ("meta-llama/llama-3.1-70b-instruct", "Llama 3.1 70B Instruct", LLM),
        # Mistral
        ("mistralai/mistral-large-2411", "Mistral Large 24.11", LLM),
        ("mistralai/mistral-medium", "Mistral Medium", LLM),
        ("mistralai/mistral-small-3.1-24b-instruct", "Mistral Small 3.1 24B", LLM),
        ("mistralai/codestral-latest", "Codestral Latest", LLM),
        # Qwen
        ("qwen/qwen3-235b-a22b", "Qwen3 235B A22B", LLM),
        ("qwen/qwen3-32b", "Qwen3 32B", LLM),
        ("qwen/qwen-2.5-72b-instruct", "Qwen 2.5 72B Instruct", LLM),
        ("qwen/qwen-2.5-coder-32b-instruct", "Qwen 2.5 Coder 32B", LLM),
        # xAI
        ("x-ai/grok-3", "Grok 3", LLM),
        ("x-ai/grok-3-mini", "Grok 3 Mini", LLM),
        ("x-ai/grok-2", "Grok 2", LLM),
        # Embedding
        ("voyage/voyage-3-large", "Voyage 3 Large", ModelCategory.EMBEDDING),
        ("voyage/voyage-3", "Voyage 3", ModelCategory.EMBEDDING),
        ("voyage/voyage-3-lite", "Voyage 3 Lite", ModelCategory.EMBEDDING),
        ("cohere/embed-english-v3.0", "Cohere Embed Eng v3", ModelCategory.EMBEDDING),
        (
            "cohere/embed-multilingual-v3.0",
            "Cohere Embed Multilingual v3",
            ModelCategory.EMBEDDING,
        ),
        # Rerank
        (
            "jina/jina-reranker-v2-base-multilingual",
            "Jina Reranker v2 Base",
            ModelCategory.RERANK,
        ),
        ("cohere/rerank-english-v3.0", "Cohere Rerank Eng v3", ModelCategory.RERANK),
        (
            "cohere/rerank-multilingual-v3.0",
            "Cohere Rerank Multilingual v3",
            ModelCategory.RERANK,
        ),
    ]
)


@register_vendor("openrouter")
class OpenRouterAdapter(BaseVendorAdapter):
    """OpenRouter aggregated catalog.

    Config:
        api_key: OpenRouter key.
        base_url: Optional override.
        site_url: Sent as HTTP-Referer for OpenRouter rankings.
        app_name: Sent as X-Title.
    """

    default_base_url = "https://openrouter.ai/api/v1"
    category_rules = (
        (ModelCategory.EMBEDDING, ("embed",)),
        (ModelCategory.RERANK, ("rerank",)),
        (ModelCategory.TTS, ("tts", "speech")),
        (ModelCategory.SPEECH_TO_TEXT, ("whisper", "transcribe")),
    )

    def _headers(self, config: dict[str, Any]) -> dict[str, str]:
        headers = super()._headers(config)
        site_url = config.get("site_url") or config.get("siteUrl")
        app_name = config.get("app_name") or config.get("appName")
        if site_url:
            headers["HTTP-Referer"] = site_url
        if app_name:
            headers["X-Title"] = app_name
        return headers

    def recommended_models(self) -> list[ModelDescriptor]:
        return list(RECOMMENDED)

    def _parse_models(self, payload: Any) -> list[ModelDescriptor]:
        models = []
        for model in payload.get("data") or []:
            model_id = model.get("id") or model.get("slug") or model.get("name")
            if not model_id:
                continue
            models.append(
                ModelDescriptor(
                    id=model_id,
                    display_name=model.get("name") or model_id,
                    category=self.resolve_category(model_id),
                )
            )
        return models
