"""CLI entrypoint for launching the exporter with Uvicorn."""
from __future__ import annotations

import logging

import uvicorn
from uvicorn.config import LOG_LEVELS

from .api import create_app
from .config import ConfigurationError, get_settings


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        logging.critical("Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    logging.getLogger().setLevel(LOG_LEVELS[settings.log_level])
    app = create_app(settings)

    logging.info("Running on %s:%d (interface %s)", settings.host, settings.port, settings.interface)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
