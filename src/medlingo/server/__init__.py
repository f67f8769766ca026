"""HTTP translation service for medlingo."""

from .app import create_app

__all__ = ["create_app"]
