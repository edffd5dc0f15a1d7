"""Entry point for the ``repo-browser`` console script."""

from __future__ import annotations
import logging
import sys
import uvicorn
from repo_browser.infrastructure.config import get_settings

logger = logging.getLogger("repo_browser")


def main() -> None:
    """Serve the configured project root with uvicorn."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    if not settings.project_root.is_dir():
        logger.error("Project root %s is not a directory", settings.project_root.resolve())
        sys.exit(1)

    uvicorn.run(
        "repo_browser.interface.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
