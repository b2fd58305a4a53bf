from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import health
from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.core.observability import configure_observability
from app.db.session import init_db, session_scope
from app.domains.auth.router import router as auth_router
from app.domains.billing.router import router as billing_router
from app.domains.clients.router import router as clients_router
from app.domains.consultants.router import router as consultants_router
from app.domains.dashboard.router import router as dashboard_router
from app.domains.projects.router import router as projects_router
from app.domains.reporting.router import router as reporting_router
from app.domains.sectors.router import router as sectors_router
from app.domains.service_types.router import router as service_types_router
from app.domains.services.router import router as services_router
from app.domains.time_entries.router import router as time_router
from app.repositories.sql import SqlRepository
from app.seed.seed_data import seed
from timebill.errors import ConflictError, NotFoundError, ValidationError

configure_logging(settings.log_level, json_logs=settings.env != "dev")
configure_observability()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.cors_origins] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth_router)
app.include_router(clients_router)
app.include_router(consultants_router)
app.include_router(services_router)
app.include_router(sectors_router)
app.include_router(service_types_router)
app.include_router(projects_router)
app.include_router(time_router)
app.include_router(dashboard_router)
app.include_router(reporting_router)
app.include_router(billing_router)


@app.exception_handler(ValidationError)
def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.info("reference_not_found", path=request.url.path, entity=exc.entity, key=exc.key)
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
def handle_conflict(request: Request, exc: ConflictError) -> JSONResponse:
    logger.info("request_conflict", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.on_event("startup")
def startup_event() -> None:
    init_db()
    if settings.seed_demo_data:
        with session_scope() as session:
            seed(SqlRepository(session))
    logger.info("startup_complete", env=settings.env)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Timebill API running", "environment": settings.env}
