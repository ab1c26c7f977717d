"""Vendor adapters.

Importing this package registers every supported vendor with the global
registry.
"""

from .anthropic import AnthropicAdapter
from .base import DEFAULT_TIMEOUT_SECONDS, BaseVendorAdapter
from .gemini import GeminiAdapter
from .openai import OpenAIAdapter
from .openrouter import OpenRouterAdapter
from .registry import VendorRegistry, get_registry, register_vendor
from .siliconflow import SiliconFlowAdapter

__all__ = [
    "BaseVendorAdapter",
    "DEFAULT_TIMEOUT_SECONDS",
    "VendorRegistry",
    "get_registry",
    "register_vendor",
    "AnthropicAdapter",
    "GeminiAdapter",
    "OpenAIAdapter",
    "OpenRouterAdapter",
    "SiliconFlowAdapter",
]
