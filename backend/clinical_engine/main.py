import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from clinical_engine.config import get_settings
from clinical_engine.database import engine, Base
from clinical_engine.services.catalog import get_exercise_catalog, load_exercise_catalog_from_yaml
from clinical_engine.services.scoring_config import load_scoring_config_from_yaml

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Reference data is loaded once per process
    if settings.scoring_config_path:
        load_scoring_config_from_yaml(settings.scoring_config_path)
    if settings.exercise_catalog_path:
        load_exercise_catalog_from_yaml(settings.exercise_catalog_path)
    else:
        get_exercise_catalog()

    # Create tables on startup
    async with engine.begin() as conn:
        # Import all models to register them with Base
        from clinical_engine import models  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Cleanup on shutdown
    await engine.dispose()


app = FastAPI(
    title="Clinical Decision Engine API",
    description="Exercise matching, protocol phase resolution and outcome tracking",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage failure", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable, please retry"},
        headers={"Retry-After": "5"},
    )


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.environment}


# API routers
from clinical_engine.api.v1.router import api_router

app.include_router(api_router, prefix="/api/v1")
