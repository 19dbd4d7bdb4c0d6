"""Run the CoreTax API with uvicorn."""

import os
from typing import Any

import uvicorn
from loguru import logger

from coretax.api.main import app
from coretax.core.config import get_settings
from coretax.core.logging import setup_logging

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def uvicorn_log_config() -> dict[str, Any]:
    """Route every uvicorn logger through Loguru's ``InterceptHandler``."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "intercept": {"class": "coretax.core.logging.InterceptHandler"},
        },
        "loggers": {
            name: {"handlers": ["intercept"], "level": "INFO", "propagate": False}
            for name in UVICORN_LOGGERS
        },
    }


def main() -> None:
    settings = get_settings()
    setup_logging(settings)

    # Container platforms hand the listening port over in PORT
    port = int(os.environ.get("PORT", settings.api_port))
    mode = "development mode with auto-reload" if settings.debug else "production mode"
    logger.info("Starting Uvicorn on http://{}:{} ({})", settings.api_host, port, mode)

    # Reload needs an import string; otherwise serve the already built app
    uvicorn.run(
        "coretax.api.main:app" if settings.debug else app,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=uvicorn_log_config(),
    )


if __name__ == "__main__":
    main()
