"""Coach Importer API: workbook uploads, import jobs and progress streams."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.coach_imports import router as coach_imports_router
from app.config import get_settings
from app.database import Base, engine
from app.models import CoachImportJob, Coach, University  # noqa: F401 - registers tables on Base

settings = get_settings()

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "celery.app.trace", "httpx")


def configure_logging() -> None:
    """Console plus log file; third-party chatter only from WARNING up."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info(
        f"🏁 Coach importer ready ({settings.app_env}): batches of "
        f"{settings.import_batch_size}, {settings.import_group_size} batches per group"
    )
    yield


app = FastAPI(
    title="Coach Importer",
    description="Import coaching staff workbooks into the recruiting database",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(coach_imports_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
