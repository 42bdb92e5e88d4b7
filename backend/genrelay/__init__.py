"""genrelay: multi-vendor text, image, and speech generation with ordered fallback."""

__version__ = "0.1.0"
