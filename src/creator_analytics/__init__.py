"""
Creator Analytics package initializer.

This package exposes ``get_creator_analytics`` and the
``CreatorAnalyticsEngine`` class for external usage.  The API module
should be imported explicitly from its own file.
"""

from .analytics_engine import CreatorAnalyticsEngine, get_creator_analytics  # noqa: F401
from .models import LoadMode  # noqa: F401

__all__ = ["CreatorAnalyticsEngine", "LoadMode", "get_creator_analytics"]
