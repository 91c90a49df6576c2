"""Local control endpoint for posturemax.

Public API:
    create_app -- FastAPI application factory
    CommandClient -- httpx client for the endpoint
"""

from posturemax.endpoint.client import CommandClient, CommandClientError

__all__ = ["CommandClient", "CommandClientError", "create_app"]


def __getattr__(name: str) -> object:
    """Lazy import for the server, which pulls in FastAPI."""
    if name == "create_app":
        from posturemax.endpoint.server import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
