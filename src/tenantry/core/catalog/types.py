"""Model catalog domain types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel

from tenantry.core.exceptions import InvalidCategory


class ModelCategory(str, Enum):
    """What a model is used for."""

    LLM = "llm"
    EMBEDDING = "embedding"
    RERANK = "rerank"
    TTS = "tts"
    SPEECH_TO_TEXT = "speech_to_text"

    @classmethod
    def parse(cls, value: "str | ModelCategory") -> "ModelCategory":
        """Parse a category, accepting the hyphenated speech-to-text spelling.

        Raises:
            InvalidCategory: If value is not one of the closed set.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            allowed = ", ".join(c.value for c in cls)
            raise InvalidCategory(
                f"Unknown model category '{value}', expected one of: {allowed}"
            ) from None


class ModelSource(str, Enum):
    """Who owns a catalog entry."""

    AUTO = "auto"  # discovered from the vendor listing
    CUSTOM = "custom"  # declared by a user


@dataclass(frozen=True)
class ModelDescriptor:
    """A model as reported by a vendor adapter."""

    id: str
    display_name: str
    category: ModelCategory = ModelCategory.LLM


class CatalogEntry(BaseModel):
    """A persisted (tenant, vendor, model) record."""

    id: UUID
    tenant_id: UUID
    vendor: str
    model_id: str
    display_name: str
    category: ModelCategory
    source: ModelSource
    enabled: bool = True
    retired: bool = False  # auto entries no longer reported by the vendor
    created_at: datetime
    updated_at: datetime | None = None


class ProviderCredential(BaseModel):
    """Encrypted vendor configuration for a tenant."""

    tenant_id: UUID
    vendor: str
    encrypted_config: str
    is_valid: bool = True
    last_validated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None


class CredentialSummary(BaseModel):
    """Public view of a credential. Never carries secrets."""

    vendor: str
    is_valid: bool
    last_validated_at: datetime | None = None


class DefaultModelBinding(BaseModel):
    """A tenant's chosen model for one category."""

    tenant_id: UUID
    category: ModelCategory
    vendor: str
    model_id: str
    updated_at: datetime | None = None
