"""
FastAPI service for the strategy paywall.

Provides:
- Access decisions with Curious Retail monthly view metering
- Gated strategy reads and the public strategy list
- Admin maintenance of accounts and strategies
- Subscription event ingestion from the billing relay

Usage:
    uvicorn paywall.main:app --reload --host 0.0.0.0 --port 8001
"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables before importing anything else
load_dotenv()

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from paywall.api import create_app  # noqa: E402

app = create_app()

logger.info("Strategy Paywall API initialized")
logger.info("API documentation available at /docs and /redoc")


if __name__ == "__main__":
    import uvicorn

    from paywall.utils.env_utils import parse_bool_env, parse_int_env

    host = os.getenv("API_HOST", "0.0.0.0")
    port = parse_int_env("API_PORT", 8001)
    reload = parse_bool_env("DEBUG", False)

    logger.info(f"Starting server on {host}:{port}")

    uvicorn.run(
        "paywall.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
    )
