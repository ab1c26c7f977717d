"""API route modules."""

from fastapi import APIRouter

from tenantry.entrypoints.api.routes.model_providers import router as model_providers_router
from tenantry.entrypoints.api.routes.tenants import router as tenants_router

# Create main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(tenants_router)
api_router.include_router(model_providers_router)

__all__ = ["api_router"]
