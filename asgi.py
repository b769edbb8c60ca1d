"""
asgi.py -- ASGI entry point for CommentBoard.

Run with:  uvicorn asgi:app --reload

api/main.py builds the application; this module only re-exports it so the
server command stays stable if the assembly ever grows more routers.
"""

from api.main import app

__all__ = ["app"]
