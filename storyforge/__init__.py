"""Illustrated children's story generation service."""

__version__ = "0.1.0"
