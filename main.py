from __future__ import annotations

import uvicorn
from foodmanager.app_logging import configure_logging
from foodmanager.config import Settings, get_settings
from foodmanager.main import app as foodmanager_app

# `uvicorn main:app` serves the same app as `python main.py`.
app = foodmanager_app


def _serve(settings: Settings, reload: bool) -> None:
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """Run the Food Manager server using ``FOODMANAGER_HOST``/``PORT``/``RELOAD``."""

    settings = get_settings()
    logger = configure_logging(settings.log_level)
    logger.info(
        "Serving Food Manager on http://%s:%s (%s, reload=%s, db=%s)",
        settings.host,
        settings.port,
        settings.environment,
        settings.reload,
        settings.database_path,
    )
    try:
        _serve(settings, settings.reload)
    except PermissionError:
        # The reload file watcher is not allowed in some sandboxes.
        if not settings.reload:
            raise
        logger.warning("Live reload is not permitted; set FOODMANAGER_RELOAD=0 to skip it")
        _serve(settings, False)


if __name__ == "__main__":
    main()
