# Third-party imports
from fastapi import APIRouter

# Local application imports
from civiclink.api.internal.main import router as internal_router

router = APIRouter(prefix="/api")

# Include internal API routers
router.include_router(internal_router)
