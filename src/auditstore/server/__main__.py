"""Run the service with ``python -m auditstore.server``."""

import uvicorn

from auditstore.config import load_settings
from auditstore.server.app import create_app
from auditstore.utils.logging import configure_logging, get_logger


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    get_logger(__name__).info(
        "Application startup...",
        extra={"host": settings.host, "port": settings.port},
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
