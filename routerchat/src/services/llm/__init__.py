"""Completion provider package."""

from .provider_gateway import BaseProviderGateway, OpenRouterGateway

__all__ = [
    "BaseProviderGateway",
    "OpenRouterGateway",
]
