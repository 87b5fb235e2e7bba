"""
friendmap HTTP API
------------------
FastAPI routes over the FriendmapDB facade.

Run with uvicorn:
    uvicorn friendmap.api.main:app --reload
"""
from .main import app, create_app

__all__ = ["app", "create_app"]
