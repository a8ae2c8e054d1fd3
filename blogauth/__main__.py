"""Run the development server: ``python -m blogauth``."""

import uvicorn

from blogauth.config import get_settings


def main() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "blogauth.main:app",
        host=settings.app.host,
        port=settings.app.port,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    main()
