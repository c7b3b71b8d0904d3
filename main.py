"""
main.py
========
Central entry point for the AVI Interview Engine.

Run with:
    uvicorn main:app --reload
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

# Configure logging for the entire application
logging.basicConfig(
    level=os.getenv("AVI_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Keep transport-level logs out of the engine output
for _transport_logger_name in ("httpx", "httpcore", "uvicorn.access"):
    logging.getLogger(_transport_logger_name).setLevel(logging.WARNING)

from avi.api.routes import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
