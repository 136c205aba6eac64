"""Run the API server with the configured host and port."""

import uvicorn

from video_service.commons.settings import get_settings


def main() -> None:
    """Start uvicorn serving ``video_service.api.main:app``."""
    settings = get_settings()
    uvicorn.run(
        "video_service.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.server.reload,
        log_level=settings.telemetry.log_level.lower(),
    )


if __name__ == "__main__":
    main()
