"""
Tools Package

HTTP client for the hosted backend (REST tables and object storage).

NOTE: The client is created lazily on first use, so importing this package
opens no connections. Import it as: `from app.tools import backend_client`
"""

from app.tools import backend_client

__all__ = [
    "backend_client",
]
