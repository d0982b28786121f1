"""Shniro server entry point.

Serves the /solve API and the question page from a single uvicorn process:
the NiceGUI page is mounted on the FastAPI app, so the page reaches /solve
on the same port. Settings come from the environment and a .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main() -> None:
    """Start the broker API with the question page mounted at /."""
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    import uvicorn
    from nicegui import ui

    from shniro.api.app import app
    from shniro.ui import chat_page  # noqa: F401 - registers the "/" page

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))

    ui.run_with(
        app,
        title="Shniro AI",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "shniro-secret"),
    )
    logger.info(f"Shniro AI listening on {host}:{port} (page at /, API at /solve)")

    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
