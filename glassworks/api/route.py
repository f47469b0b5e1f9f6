from fastapi import APIRouter

from glassworks.api.admin import router as admin_router
from glassworks.api.auth import router as auth_router
from glassworks.api.billing import router as billing_router
from glassworks.api.catalog import router as catalog_router
from glassworks.api.company_settings import router as company_settings_router

router = APIRouter()  # No default tag, every endpoint sets its own
router.include_router(auth_router)
router.include_router(admin_router)
router.include_router(catalog_router)
router.include_router(billing_router)
router.include_router(company_settings_router)


@router.get("/health", tags=["System"])
def health():
    """Health check endpoint."""
    return {"status": "ok"}
