"""Adapters - Infrastructure implementations of core interfaces.

Adapters are organized by type:
- auth/: Tenant repository (PostgreSQL)
- catalog/: Catalog repository (PostgreSQL)
- crypto/: Credential cipher (Fernet)
- db/: Connection pool and the in-memory store
- vendors/: Model vendor adapters (OpenAI, Gemini, OpenRouter, SiliconFlow, Anthropic)
"""
