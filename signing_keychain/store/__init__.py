"""Store tool invokers."""

from .base import StoreTool, StoreToolError
from .security import SecurityTool

__all__ = [
    "StoreTool",
    "StoreToolError",
    "SecurityTool",
]
