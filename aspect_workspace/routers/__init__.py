"""
FastAPI routers for the Aspect Model workspace.
"""

from aspect_workspace.routers import models, package

__all__ = ["models", "package"]
