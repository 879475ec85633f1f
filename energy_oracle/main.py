"""FastAPI application setup for the Energy Oracle."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import router as api_router
from .config import settings
from .errors import OracleError
from .service import build_oracle_service
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the oracle service on startup and release it on shutdown."""
    setup_logging(level=settings.log_level, job_name="energy_oracle")
    app.state.oracle = build_oracle_service(settings)
    try:
        yield
    finally:
        app.state.oracle.close()


app = FastAPI(title="Energy Oracle", lifespan=lifespan)


@app.exception_handler(OracleError)
async def oracle_error_handler(request: Request, exc: OracleError):
    """Render oracle failures as the standard error envelope."""
    logger.error("Request failed", extra={"path": request.url.path, "code": exc.code, "error": exc.message})
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


@app.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}


# API routes
app.include_router(api_router, prefix="/v1/oracle")
