"""Authentication module for API access control."""

from .tokens import create_access_token, verify_token

__all__ = ["create_access_token", "verify_token"]
