"""Run the local catalog API with ``python -m ghostclient``."""

from __future__ import annotations

import uvicorn

from .config import get_settings


def main() -> None:
    """Serve the catalog API on the configured host and port."""

    config = get_settings()
    uvicorn.run(
        "ghostclient.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
        reload=config.environment == "development",
    )


if __name__ == "__main__":
    main()
