"""Cross-cutting HTTP concerns wired into the app factory."""

from fastapi import FastAPI

from swadrive.config import Settings
from swadrive.middleware.cors import setup_cors
from swadrive.middleware.error_handler import setup_error_handlers
from swadrive.middleware.logging import setup_logging
from swadrive.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, then install handlers and middleware on the app.

    Starlette runs middleware outermost-last-added: CORS wraps the request-id
    layer so browser clients can read X-Request-Id and the {"message": ...}
    error bodies.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
