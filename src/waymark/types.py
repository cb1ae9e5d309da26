"""
Type definitions for the Waymark router.
Following Python 3.12 typing conventions.
"""

import importlib
from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# ASGI Types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]

# Handler Types
RouteHandler: TypeAlias = Callable[..., Awaitable[Any]]

# Reserved parameter keys
CONTROLLER_KEY: str = "_controller"
ROUTE_KEY: str = "_route"
INTERNAL_PREFIX: str = "_"


@dataclass(frozen=True, slots=True)
class Controller:
    """
    Reference to the handler a route dispatches to.

    Stored under the ``_controller`` default of a route. The target is
    either the callable itself or a ``"module:attribute"`` import string
    that is resolved on first use.
    """

    target: Callable[..., Any] | str

    def resolve(self) -> Callable[..., Any]:
        """Return the handler callable, importing it if necessary."""
        if callable(self.target):
            return self.target

        module_path, _, attr_name = self.target.partition(":")
        if not attr_name:
            raise ValueError(
                f"Controller {self.target!r} must use the 'module:attribute' form"
            )
        module = importlib.import_module(module_path)
        handler = getattr(module, attr_name)
        if not callable(handler):
            raise TypeError(f"Controller {self.target!r} is not callable")
        return handler

    def __str__(self) -> str:
        if isinstance(self.target, str):
            return self.target
        module = getattr(self.target, "__module__", None)
        name = getattr(self.target, "__qualname__", repr(self.target))
        return f"{module}:{name}" if module else name


# Parameter Types
Scalar: TypeAlias = str | int | float | bool
ParamValue: TypeAlias = Scalar | Controller | None
Parameters: TypeAlias = dict[str, ParamValue]
