"""Procedural dungeon level generator."""

__version__ = "0.1.0"
