"""FastAPI endpoints for the Shniro broker.

Endpoints:
    - GET /health: Service health status
    - POST /solve: Answer a question, optionally about an uploaded image
"""

from shniro.api.app import app, create_app

__all__ = ["app", "create_app"]
