"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
open (no auth required); /auth/me asks for the principal itself.
"""

from fastapi import APIRouter, Depends

from devtasks.api.auth import router as auth_router
from devtasks.api.health import router as health_router
from devtasks.api.projects import router as projects_router
from devtasks.api.tasks import router as tasks_router
from devtasks.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes (no auth required)
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes (require a valid bearer JWT)
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
