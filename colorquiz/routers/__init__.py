"""API routers for Color Quiz.

This module exports all API routers for the application.
"""

from colorquiz.routers import attempts, health, sessions

__all__ = [
    "attempts",
    "health",
    "sessions",
]
