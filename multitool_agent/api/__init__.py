"""
FastAPI server module for the multi-tool agent.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
