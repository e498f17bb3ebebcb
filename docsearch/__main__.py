"""Run the service with uvicorn: ``python -m docsearch``."""

import uvicorn

from docsearch.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "docsearch.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
