"""Tests for CredentialStore."""

import pytest

from tenantry.adapters.crypto.fernet import FernetCipher
from tenantry.adapters.db.memory import InMemoryStore
from tenantry.core.auth.types import Tenant
from tenantry.core.catalog.credentials import CredentialStore, decode_config
from tenantry.core.catalog.reconciler import CatalogReconciler
from tenantry.core.catalog.settings import ModelSettingsStore
from tenantry.core.catalog.types import ModelCategory
from tenantry.core.exceptions import (
    CredentialNotFound,
    DecryptionError,
    InvalidCredential,
    VendorNotSupported,
)
from tests.fixtures.domain_objects import store_credential
from tests.fixtures.vendors import FakeVendorAdapter


class TestDecodeConfig:
    """Tests for decode_config."""

    def test_round_trip(self, cipher: FernetCipher) -> None:
        """A stored JSON object decodes back to the same mapping."""
        token = cipher.encrypt('{"api_key": "sk-1"}')

        assert decode_config(cipher, token) == {"api_key": "sk-1"}

    @pytest.mark.parametrize("plaintext", ["not json", "[1, 2]", '"sk-1"'])
    def test_rejects_non_object(self, cipher: FernetCipher, plaintext: str) -> None:
        """Anything but a JSON object is a decryption error."""
        with pytest.raises(DecryptionError):
            decode_config(cipher, cipher.encrypt(plaintext))


class TestSaveCredential:
    """Tests for saving vendor credentials."""

    async def test_valid_credential_is_stored_and_reconciled(
        self,
        credential_store: CredentialStore,
        store: InMemoryStore,
        openai_vendor: FakeVendorAdapter,
        tenant: Tenant,
    ) -> None:
        """A validated key is stored encrypted and the catalog is filled at once."""
        result = await credential_store.save_credential(
            tenant.id, "openai", {"api_key": "sk-live-123"}
        )

        assert result == {"success": True}
        assert openai_vendor.validated == [{"api_key": "sk-live-123"}]
        stored = await store.get_credential(tenant.id, "openai")
        assert stored is not None
        assert "sk-live-123" not in stored.encrypted_config
        entries = await store.list_entries(tenant.id)
        assert {e.model_id for e in entries} == {"gpt-4o", "text-embedding-3-small"}

    async def test_rejected_credential_writes_nothing(
        self,
        credential_store: CredentialStore,
        store: InMemoryStore,
        openai_vendor: FakeVendorAdapter,
        tenant: Tenant,
    ) -> None:
        """A key the vendor rejects leaves no credential and no catalog rows."""
        openai_vendor.valid = False

        with pytest.raises(InvalidCredential) as exc_info:
            await credential_store.save_credential(tenant.id, "openai", {"api_key": "bad"})

        assert exc_info.value.vendor == "openai"
        assert await store.get_credential(tenant.id, "openai") is None
        assert await store.list_entries(tenant.id) == []

    async def test_refresh_failure_after_commit_still_succeeds(
        self,
        credential_store: CredentialStore,
        store: InMemoryStore,
        tenant: Tenant,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A stored credential is reported saved even if the catalog write fails."""

        async def failing_apply(tenant_id, plan) -> None:
            raise RuntimeError("connection reset")

        monkeypatch.setattr(store, "apply_plan", failing_apply)

        result = await credential_store.save_credential(tenant.id, "openai", {"api_key": "sk-1"})

        assert result == {"success": True}
        assert await store.get_credential(tenant.id, "openai") is not None

    async def test_unsupported_vendor(
        self, credential_store: CredentialStore, tenant: Tenant
    ) -> None:
        """Unknown vendors are rejected before validation."""
        with pytest.raises(VendorNotSupported):
            await credential_store.save_credential(tenant.id, "acme-ai", {"api_key": "k"})

    async def test_resave_replaces_config(
        self, credential_store: CredentialStore, store: InMemoryStore, tenant: Tenant
    ) -> None:
        """Saving again replaces the stored config and keeps one row."""
        await credential_store.save_credential(tenant.id, "openai", {"api_key": "first"})
        await credential_store.save_credential(tenant.id, "openai", {"api_key": "second"})

        config = await credential_store.get_decrypted_config(tenant.id, "openai")

        assert config == {"api_key": "second"}
        assert len(await store.list_credentials(tenant.id)) == 1


class TestCredentialQueries:
    """Tests for listing, reading and deleting credentials."""

    async def test_summary_has_no_secrets(
        self, credential_store: CredentialStore, tenant: Tenant
    ) -> None:
        """Summaries carry vendor and validity only."""
        await credential_store.save_credential(tenant.id, "openai", {"api_key": "sk-1"})

        summaries = await credential_store.list_credentials_summary(tenant.id)

        assert [s.vendor for s in summaries] == ["openai"]
        assert summaries[0].is_valid is True
        assert summaries[0].last_validated_at is not None
        assert "sk-1" not in summaries[0].model_dump_json()

    async def test_delete_cascades_catalog_and_bindings(
        self, credential_store: CredentialStore, store: InMemoryStore, tenant: Tenant
    ) -> None:
        """Deleting a credential removes the vendor's entries and bindings."""
        await credential_store.save_credential(tenant.id, "openai", {"api_key": "sk-1"})
        await store.upsert_binding(tenant.id, ModelCategory.LLM, "openai", "gpt-4o")

        await credential_store.delete_credential(tenant.id, "openai")

        assert await store.get_credential(tenant.id, "openai") is None
        assert await store.list_entries(tenant.id, vendor="openai") == []
        assert await store.get_binding(tenant.id, ModelCategory.LLM) is None

    async def test_delete_removes_custom_model_and_its_binding(
        self,
        credential_store: CredentialStore,
        reconciler: CatalogReconciler,
        model_settings: ModelSettingsStore,
        store: InMemoryStore,
        tenant: Tenant,
    ) -> None:
        """User-declared models and the defaults pointing at them go with the credential."""
        await credential_store.save_credential(tenant.id, "openai", {"api_key": "sk-1"})
        custom = await reconciler.create_custom_model(
            tenant.id, vendor="openai", model_id="my-model", category="llm"
        )
        await model_settings.update_model_setting(tenant.id, "llm", "openai", "my-model")

        await credential_store.delete_credential(tenant.id, "openai")

        assert await store.get_entry(tenant.id, custom.id) is None
        assert await model_settings.get_model_settings(tenant.id) == []

    async def test_delete_missing(self, credential_store: CredentialStore, tenant: Tenant) -> None:
        """Deleting an unconfigured vendor raises CredentialNotFound."""
        with pytest.raises(CredentialNotFound):
            await credential_store.delete_credential(tenant.id, "openai")

    async def test_decrypted_config_missing(
        self, credential_store: CredentialStore, tenant: Tenant
    ) -> None:
        """Reading an unconfigured vendor raises CredentialNotFound."""
        with pytest.raises(CredentialNotFound):
            await credential_store.get_decrypted_config(tenant.id, "gemini")

    async def test_decrypted_config_with_wrong_key(
        self, credential_store: CredentialStore, store: InMemoryStore, tenant: Tenant
    ) -> None:
        """A row written under another key raises DecryptionError."""
        foreign = FernetCipher(FernetCipher.generate_key())
        await store_credential(store, foreign, tenant.id, "gemini")

        with pytest.raises(DecryptionError):
            await credential_store.get_decrypted_config(tenant.id, "gemini")
