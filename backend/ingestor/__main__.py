"""Command-line entry point — ``python -m ingestor`` / ``embedding-ingestor``."""

import logging
import sys

import uvicorn

from ingestor.config import load_settings
from ingestor.domain.exceptions import ConfigurationError
from ingestor.infrastructure.logging.log_config import setup_logging
from ingestor.main import create_app

logger = logging.getLogger("ingestor")


def main() -> None:
    """Load settings, then serve the intake API on the configured address."""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Couldn't parse environment variables: %s", exc)
        sys.exit(1)

    setup_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.bind_host,
        port=settings.bind_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
