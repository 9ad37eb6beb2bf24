"""Shared type aliases used across waypost modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: (request, response) or (request, response, proceed)
Handler: TypeAlias = Callable[..., Any]

# Startup / shutdown hook, sync or async
Hook: TypeAlias = Callable[[], Any]
