"""
Gateway Factory Module

Plugin-based factory system for building the gateway's FastAPI application.
"""

from .gateway_builder import GatewayBuilder
from .plugin import GatewayPlugin

__all__ = [
    "GatewayBuilder",
    "GatewayPlugin",
]
