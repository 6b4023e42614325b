from fastapi import APIRouter
from .auth import router as auth_router
from .users import router as users_router
from .projects import router as projects_router
from .backlog import router as backlog_router
from .sprints import router as sprints_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(projects_router, prefix="/projects", tags=["projects"])
api_router.include_router(backlog_router, prefix="/backlog", tags=["backlog"])
api_router.include_router(sprints_router, prefix="/sprints", tags=["sprints"])
