"""CORS for the SwaDrive web clients.

The customer and helper pages are static sites (GitHub Pages in production,
Live Server or the local dev server while developing), so every API call is
cross-origin and carries a bearer token.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swadrive.config import Settings

# Headers the clients send: the bearer token, JSON bodies and an optional trace id.
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-Id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow settings.cors_origins to call the API with credentials."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-Id"],
    )
