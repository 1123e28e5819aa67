"""
API Routers
Separate router modules for each domain.
"""

from app.routers import workspace

__all__ = ["workspace"]
