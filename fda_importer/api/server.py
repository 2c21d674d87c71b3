"""
Run the HTTP entry point with uvicorn.

Usage:
    python -m fda_importer.api.server
"""

import uvicorn

from fda_importer.api.app import create_app
from fda_importer.config import load_settings
from fda_importer.observability.logger import get_logger


logger = get_logger(__name__)


def main():
    settings = load_settings()
    app = create_app(settings)
    logger.info(f"Server listening on port {settings.server.port}")
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
