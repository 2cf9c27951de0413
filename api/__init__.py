"""
API Module for the Design Critique Assistant

This module provides REST API endpoints for design critique, progress
metrics and learner feedback.
"""

from .main import app

__version__ = "1.0.0"
__all__ = ["app"]
