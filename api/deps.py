"""
Dependency injection utilities for API endpoints.
"""

from fastapi import Request

from services.connection_registry import ConnectionRegistry


def get_connection_registry(request: Request) -> ConnectionRegistry:
    """Registry owned by the realtime host, exposed through app state."""
    return request.app.state.connection_registry
