# avi/api/__init__.py
# ====================
# API Layer - AVI Interview Engine
#
# Responsibility:
#   - FastAPI application exposing session creation, answer submission,
#     session reports, financial coherence and catalog lookups
#   - In-process session store (one writer lock per session)
#
# Public API:
#   - app - FastAPI application (served by main.py via uvicorn)

from avi.api.routes import app  # noqa: F401
