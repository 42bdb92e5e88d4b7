"""API routers for genrelay."""

from genrelay.api.health import router as health_router
from genrelay.api.image import router as image_router
from genrelay.api.speech import router as speech_router
from genrelay.api.text import router as text_router

__all__ = [
    "health_router",
    "image_router",
    "speech_router",
    "text_router",
]
