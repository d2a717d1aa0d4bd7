from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from campus_timetable.api.routes import calendar, classrooms, conflicts, health, schedules, views
from campus_timetable.core.config import get_settings
from campus_timetable.core.exceptions import AppError
from campus_timetable.core.logging_config import configure_logging
from campus_timetable.core.middleware import AccessLogMiddleware, RequestSizeLimitMiddleware
from campus_timetable.db.bootstrap import ensure_schema
from campus_timetable.db.session import engine

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    ensure_schema(app.state.engine)
    yield


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.state.engine = engine
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
if settings.log_requests:
    app.add_middleware(AccessLogMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(classrooms.router, prefix=f"{settings.api_prefix}/classrooms", tags=["classrooms"])
app.include_router(schedules.router, prefix=f"{settings.api_prefix}/schedules", tags=["schedules"])
app.include_router(conflicts.router, prefix=f"{settings.api_prefix}/conflicts", tags=["conflicts"])
app.include_router(calendar.router, prefix=f"{settings.api_prefix}/calendar", tags=["calendar"])
app.include_router(views.router, prefix=f"{settings.api_prefix}/views", tags=["views"])
