"""Dependency injection and application lifespan management."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import Request

from tenantry.adapters.auth.postgres import PostgresTenantRepository
from tenantry.adapters.catalog.postgres import PostgresCatalogRepository
from tenantry.adapters.crypto.fernet import FernetCipher
from tenantry.adapters.db.app_db import AppDatabase
from tenantry.adapters.db.memory import InMemoryStore
from tenantry.adapters.vendors import get_registry
from tenantry.core.auth.context import AuthorizationPipeline
from tenantry.core.auth.repository import TenantRepository
from tenantry.core.catalog.credentials import CredentialStore
from tenantry.core.catalog.interfaces import Cipher, VendorResolver
from tenantry.core.catalog.reconciler import CatalogReconciler
from tenantry.core.catalog.repository import CatalogRepository
from tenantry.core.catalog.settings import ModelSettingsStore
from tenantry.core.tenancy.directory import TenantDirectory

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = structlog.get_logger()


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        self.app_database_url = os.getenv(
            "APP_DATABASE_URL", "postgresql://localhost:5432/tenantry"
        )
        self.encryption_key = os.getenv("ENCRYPTION_KEY", "")

        # Vendor call budgets
        self.vendor_timeout_seconds = float(os.getenv("VENDOR_TIMEOUT_SECONDS", "10"))
        self.reconcile_timeout_seconds = float(os.getenv("RECONCILE_TIMEOUT_SECONDS", "15"))

        self.cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

    @property
    def use_memory_store(self) -> bool:
        """Whether APP_DATABASE_URL selects the in-memory store."""
        return self.app_database_url.startswith("memory://")


settings = Settings()


def configure_services(
    app: FastAPI,
    tenant_repo: TenantRepository,
    catalog_repo: CatalogRepository,
    cipher: Cipher,
    vendors: VendorResolver,
    reconcile_timeout_seconds: float = 15.0,
) -> None:
    """Wire the domain services onto app.state."""
    reconciler = CatalogReconciler(
        catalog_repo,
        cipher,
        vendors,
        vendor_timeout=reconcile_timeout_seconds,
    )
    app.state.tenant_repo = tenant_repo
    app.state.catalog_repo = catalog_repo
    app.state.pipeline = AuthorizationPipeline(tenant_repo)
    app.state.directory = TenantDirectory(tenant_repo)
    app.state.reconciler = reconciler
    app.state.credential_store = CredentialStore(catalog_repo, cipher, vendors, reconciler)
    app.state.model_settings = ModelSettingsStore(catalog_repo)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - setup and teardown.

    This context manager handles:
    - Repository selection (PostgreSQL, or in-memory for memory:// URLs)
    - Credential cipher setup
    - Vendor registry configuration
    """
    app_db: AppDatabase | None = None
    tenant_repo: TenantRepository
    catalog_repo: CatalogRepository

    if settings.use_memory_store:
        store = InMemoryStore()
        tenant_repo, catalog_repo = store, store
        logger.warning("memory_store_enabled")
    else:
        app_db = AppDatabase(settings.app_database_url)
        await app_db.connect()
        tenant_repo = PostgresTenantRepository(app_db)
        catalog_repo = PostgresCatalogRepository(app_db)

    encryption_key = settings.encryption_key
    if not encryption_key:
        # Credentials saved under a generated key are unreadable after restart
        encryption_key = FernetCipher.generate_key()
        logger.warning("encryption_key_generated")

    registry = get_registry()
    registry.configure(timeout_seconds=settings.vendor_timeout_seconds)

    configure_services(
        app,
        tenant_repo,
        catalog_repo,
        FernetCipher(encryption_key),
        registry,
        reconcile_timeout_seconds=settings.reconcile_timeout_seconds,
    )
    app.state.app_db = app_db

    logger.info(
        "application_started",
        store="memory" if app_db is None else "postgres",
        vendors=registry.supported_vendors(),
    )

    yield

    if app_db is not None:
        await app_db.close()


def get_pipeline(request: Request) -> AuthorizationPipeline:
    """Get the authorization pipeline from app state."""
    pipeline: AuthorizationPipeline = request.app.state.pipeline
    return pipeline


def get_directory(request: Request) -> TenantDirectory:
    """Get the tenant directory from app state."""
    directory: TenantDirectory = request.app.state.directory
    return directory


def get_reconciler(request: Request) -> CatalogReconciler:
    """Get the catalog reconciler from app state."""
    reconciler: CatalogReconciler = request.app.state.reconciler
    return reconciler


def get_credential_store(request: Request) -> CredentialStore:
    """Get the credential store from app state."""
    store: CredentialStore = request.app.state.credential_store
    return store


def get_model_settings(request: Request) -> ModelSettingsStore:
    """Get the model settings store from app state."""
    model_settings: ModelSettingsStore = request.app.state.model_settings
    return model_settings
