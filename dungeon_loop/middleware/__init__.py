"""Middleware package for the dungeon generator API."""

from dungeon_loop.middleware.error_handler import setup_error_handlers

__all__ = [
    "setup_error_handlers",
]
