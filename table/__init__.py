"""Table host package: drives one arbiter hand over WebSocket."""

from .server import TableHost

__all__ = ["TableHost"]
