"""
Transport module - HTTP surface of the auth service

Provides:
- HTTPTransport: aiohttp server exposing /auth/* endpoints
"""

from .http_transport import HTTPTransport, error_middleware

__all__ = ["HTTPTransport", "error_middleware"]
