import os

import uvicorn

from energy_oracle.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def log_configured_apis() -> None:
    """Warn up front about upstreams that will serve fallback data."""
    missing = [name for name, configured in settings.configured_apis().items() if not configured]
    if missing:
        logger.warning("No API key for some upstreams; they will serve mock data", extra={"apis": missing})
    else:
        logger.info("All upstream APIs configured")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="energy_oracle")
    log_configured_apis()

    uvicorn.run(
        "energy_oracle.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
