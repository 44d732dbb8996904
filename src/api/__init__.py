"""FastAPI application for image schedule computation.

This module provides a REST API with endpoints for:
- /health: Service health check
- /schedule: Full schedule computation
- /schedule/visible: Items on screen at a probe time

Example:
    To run the API server:

    $ uvicorn src.api.main:app --host 0.0.0.0 --port 8000
"""

from .main import app

__all__ = ["app"]
