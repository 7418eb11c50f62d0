"""Application entry point for the OCR Pro API server."""

import uvicorn

from ocrpro.api.app import create_app
from ocrpro.utils.config import load_config
from ocrpro.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000, proxy_headers=True)


if __name__ == "__main__":
    main()
