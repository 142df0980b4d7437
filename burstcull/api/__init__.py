"""
API package for burstcull.

Provides the Flask blueprint for driving and inspecting grouping runs.
"""

from __future__ import annotations

from .routes import api

__all__ = ['api']
