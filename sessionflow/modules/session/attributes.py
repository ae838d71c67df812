"""Attribute-style access to session data, layered outside the core."""

from typing import Any


class SessionAttributes:
    """
    Thin adapter exposing session keys as attributes.

    Usage:
        attrs = SessionAttributes(manager)
        attrs.cart = {"sku-1": 2}
        attrs.cart          # -> {"sku-1": 2}
        del attrs.cart

    Reading a missing key raises AttributeError so getattr() defaults work.
    The session identifier is exposed as the session_id attribute.
    """

    __slots__ = ("_manager",)

    def __init__(self, manager):
        object.__setattr__(self, "_manager", manager)

    def __getattr__(self, name: str) -> Any:
        manager = object.__getattribute__(self, "_manager")
        if name == "session_id":
            return manager.session_id
        if not manager.has(name):
            raise AttributeError(name)
        return manager.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self._manager.set(name, value)

    def __delattr__(self, name: str) -> None:
        if not self._manager.has(name):
            raise AttributeError(name)
        self._manager.remove(name)
