"""
FairPoker Server - FastAPI HTTP Layer
"""

from fairpoker.server.app import app, create_app

__all__ = ["app", "create_app"]
