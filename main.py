"""
Production entrypoint for the Appraisal Valuation Engine.

This is the ONLY Uvicorn entrypoint used in production.
Binds to 0.0.0.0:$PORT and logs JSON unless LOG_FORMAT says otherwise.
"""

import logging
import os

import uvicorn

from utils.logging_config import configure_logging

if __name__ == "__main__":
    configure_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FORMAT", "json"))

    port = int(os.getenv("PORT", "8000"))
    logging.getLogger(__name__).info("Starting Appraisal Valuation Engine on port %d", port)

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port, log_config=None)
