"""SiliconFlow vendor adapter."""

from __future__ import annotations

from typing import Any

from tenantry.adapters.vendors.base import BaseVendorAdapter, descriptors
from tenantry.adapters.vendors.registry import register_vendor
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor

LLM = ModelCategory.LLM

RECOMMENDED = descriptors(
    [
        # DeepSeek
        ("deepseek-ai/DeepSeek-R1", "DeepSeek R1", LLM),
        ("deepseek-ai/DeepSeek-R1-Distill-Qwen-32B", "DeepSeek R1 Distill Qwen 32B", LLM),
        ("deepseek-ai/DeepSeek-R1-Distill-Qwen-14B", "DeepSeek R1 Distill Qwen 14B", LLM),
        ("deepseek-ai/DeepSeek-R1-Distill-Qwen-7B", "DeepSeek R1 Distill Qwen 7B", LLM),
        ("deepseek-ai/DeepSeek-V3", "DeepSeek V3", LLM),
        ("deepseek-ai/DeepSeek-V2.5", "DeepSeek V2.5", LLM),
        ("Pro/deepseek-ai/DeepSeek-R1", "DeepSeek R1 (Pro)", LLM),
        ("Pro/deepseek-ai/DeepSeek-V3", "DeepSeek V3 (Pro)", LLM),
        # Qwen
        ("Qwen/Qwen3-235B-A22B", "Qwen3 235B A22B", LLM),
        ("Qwen/Qwen3-32B", "Qwen3 32B", LLM),
        ("Qwen/Qwen3-14B", "Qwen3 14B", LLM),
        ("Qwen/Qwen3-8B", "Qwen3 8B", LLM),
        ("Qwen/Qwen2.5-72B-Instruct", "Qwen 2.5 72B Instruct", LLM),
        ("Qwen/Qwen2.5-32B-Instruct", "Qwen 2.5 32B Instruct", LLM),
        ("Qwen/Qwen2.5-14B-Instruct", "Qwen 2.5 14B Instruct", LLM),
        ("Qwen/Qwen2.5-7B-Instruct", "Qwen 2.5 7B Instruct", LLM),
        ("Qwen/Qwen2.5-Coder-32B-Instruct", "Qwen 2.5 Coder 32B", LLM),
        ("Pro/Qwen/Qwen2.5-72B-Instruct", "Qwen 2.5 72B (Pro)", LLM),
        # GLM
        ("THUDM/GLM-4-9B-0414", "GLM-4 9B", LLM),
        ("THUDM/GLM-Z1-32B-0414", "GLM-Z1 32B", LLM),
        ("THUDM/GLM-Z1-9B-0414", "GLM-Z1 9B", LLM),
        # Other chat models
        ("internlm/internlm2_5-20b-chat", "InternLM 2.5 20B Chat", LLM),
        ("internlm/internlm2_5-7b-chat", "InternLM 2.5 7B Chat", LLM),
        ("01-ai/Yi-1.5-34B-Chat", "Yi 1.5 34B Chat", LLM),
        ("01-ai/Yi-1.5-9B-Chat", "Yi 1.5 9B Chat", LLM),
        # Embedding
        ("BAAI/bge-m3", "BGE M3", ModelCategory.EMBEDDING),
        ("BAAI/bge-large-zh-v1.5", "BGE Large Zh v1.5", ModelCategory.EMBEDDING),
        ("BAAI/bge-large-en-v1.5", "BGE Large En v1.5", ModelCategory.EMBEDDING),
        ("Pro/BAAI/bge-m3", "BGE M3 (Pro)", ModelCategory.EMBEDDING),
        (
            "netease-youdao/bce-embedding-base_v1",
            "BCE Embedding Base v1",
            ModelCategory.EMBEDDING,
        ),
        # Rerank
        ("BAAI/bge-reranker-v2-m3", "BGE Reranker v2 M3", ModelCategory.RERANK),
        (
            "netease-youdao/bce-reranker-base_v1",
            "BCE Reranker Base v1",
            ModelCategory.RERANK,
        ),
        # Audio
        ("FunAudioLLM/CosyVoice2-0.5B", "CosyVoice2 0.5B", ModelCategory.TTS),
        ("fishaudio/fish-speech-1.5", "Fish Speech 1.5", ModelCategory.TTS),
        ("FunAudioLLM/SenseVoiceSmall", "SenseVoice Small", ModelCategory.SPEECH_TO_TEXT),
    ]
)


@register_vendor("siliconflow")
class SiliconFlowAdapter(BaseVendorAdapter):
    """SiliconFlow hosted open-weight models.

    Config:
        api_key: SiliconFlow key.
        base_url: Optional override, e.g. the international endpoint.
    """

    default_base_url = "https://api.siliconflow.cn/v1"
    category_rules = (
        (ModelCategory.EMBEDDING, ("embed",)),
        (ModelCategory.RERANK, ("rerank",)),
        (ModelCategory.TTS, ("tts",)),
        (ModelCategory.SPEECH_TO_TEXT, ("asr", "speech", "whisper")),
    )

    def recommended_models(self) -> list[ModelDescriptor]:
        return list(RECOMMENDED)

    def _parse_models(self, payload: Any) -> list[ModelDescriptor]:
        models = []
        for model in payload.get("data") or payload.get("models") or []:
            model_id = model.get("id") or model.get("name")
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
