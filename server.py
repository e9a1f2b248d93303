"""Relay server entry point."""

from __future__ import annotations

from typing import Optional

import uvicorn

from config.settings import load_config
from modules.relay.server import create_relay_app
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> None:
    """Load configuration and serve the relay with uvicorn."""
    config = load_config(config_path)
    logger = setup_logging(config, name="banana_studio.relay")
    if not config.api_key:
        logger.warning("API_KEY is not set; provider calls will fail")
    app = create_relay_app(config)
    logger.info("Server running on port %s", config.relay_port)
    uvicorn.run(app, host=config.relay_host, port=config.relay_port)


if __name__ == "__main__":
    main()
