# Third-party imports
from fastapi import APIRouter

# Local application imports
from civiclink.api.internal.routes.v1.admin_routes import router as admin_router
from civiclink.api.internal.routes.v1.issues import comment_router, issue_router, vote_router
from civiclink.api.internal.routes.v1.user_routes import router as user_router

router = APIRouter(prefix="/v1")

# Include all internal v1 routers
router.include_router(issue_router)
router.include_router(vote_router)
router.include_router(comment_router)
router.include_router(admin_router)
router.include_router(user_router)
