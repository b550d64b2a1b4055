"""Main application entry point for the FastAPI application.

This module initializes the application and creates the FastAPI instance using
the application factory pattern. `run` serves it with uvicorn and backs the
`authlink` console script.
"""

import uvicorn

from authlink.core.application import create_application
from authlink.core.config.settings import settings
from authlink.core.initialization import initialize_application

initialize_application()

app = create_application()


def run() -> None:
    uvicorn.run(
        "authlink.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.APP_ENV == "development",
        log_config=None,
    )


if __name__ == "__main__":
    run()
