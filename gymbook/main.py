import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from gymbook.db.init_db import create_database
from gymbook.db.base import Base
from gymbook.db.session import engine, SessionLocal
from gymbook.core.clock import get_clock
from gymbook.core.config import settings
from gymbook.core.exceptions import DomainError
from gymbook.api.v1.router import api_router

logger = logging.getLogger(__name__)


async def _sweep_loop() -> None:
    """Background task: complete finished bookings and expire stale extensions."""
    from gymbook.utils.sweeps import run_sweeps

    while True:
        try:
            db = SessionLocal()
            try:
                counts = run_sweeps(db, get_clock())
                if counts["completed"] or counts["expired_extensions"]:
                    logger.info(
                        "Sweep completed %d booking(s), expired %d extension(s).",
                        counts["completed"],
                        counts["expired_extensions"],
                    )
            finally:
                db.close()
        except Exception:
            logger.exception("Error during booking sweep.")
        await asyncio.sleep(settings.SWEEP_INTERVAL_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists and create tables
    create_database()
    Base.metadata.create_all(bind=engine)

    sweep_task = None
    if settings.SWEEPS_ENABLED:
        sweep_task = asyncio.create_task(_sweep_loop())
    yield

    # Shutdown: cancel background task
    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass


from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"Hello": "GymBook"}
