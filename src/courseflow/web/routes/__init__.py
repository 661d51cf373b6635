"""Route handlers for the Web API."""

from courseflow.web.routes.assessments import router as assessments_router
from courseflow.web.routes.calendar import router as calendar_router
from courseflow.web.routes.courses import router as courses_router
from courseflow.web.routes.health import router as health_router
from courseflow.web.routes.sync import router as sync_router
from courseflow.web.routes.upload import router as upload_router

__all__ = [
    "assessments_router",
    "calendar_router",
    "courses_router",
    "health_router",
    "sync_router",
    "upload_router",
]
