"""Run the genrelay server with uvicorn."""

import uvicorn

from genrelay.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "genrelay.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
