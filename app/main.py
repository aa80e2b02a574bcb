import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.audit.router import router as audit_router
from app.api.v1.auth.router import router as auth_router
from app.api.v1.courses.router import router as courses_router
from app.api.v1.enrollments.router import router as enrollments_router
from app.api.v1.export.router import router as export_router
from app.api.v1.students.router import router as students_router
from app.api.v1.users.router import router as users_router
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.init_db import create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        await create_tables()
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Student Records Backend", lifespan=lifespan)

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(students_router)
    app.include_router(courses_router)
    app.include_router(enrollments_router)
    app.include_router(attendance_router)
    app.include_router(users_router)
    app.include_router(audit_router)
    app.include_router(export_router)

    logger.info(
        "Application configured (max attendance per semester: %s)",
        settings.max_attendance_per_semester,
    )
    return app


app = create_app()
