"""
asgi.py -- ASGI entry point for authcore.

Run with:  uvicorn asgi:app --reload

Kept separate from api/main.py so process managers and tests import the
same module path regardless of how the app is assembled.
"""

from api.main import app

__all__ = ["app"]
