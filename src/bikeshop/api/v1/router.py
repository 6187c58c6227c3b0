from fastapi import APIRouter

from src.bikeshop.api.v1 import notifications, workflow_steps

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(workflow_steps.router)
api_router.include_router(notifications.router)
