"""
Session context consumed by the login flow: get/set/delete of str or bool values by key.
The web layer owns the store; the flow only sees this narrow interface.
"""
from collections.abc import MutableMapping
from typing import Protocol

SessionValue = str | bool


class SessionContext(Protocol):
    def get(self, key: str) -> SessionValue | None: ...

    def set(self, key: str, value: SessionValue) -> None: ...

    def delete(self, key: str) -> None: ...


class MappingSession:
    """SessionContext over a dict-like store (e.g. Starlette's request.session)."""

    def __init__(self, data: MutableMapping | None = None):
        self._data = data if data is not None else {}

    def get(self, key: str) -> SessionValue | None:
        return self._data.get(key)

    def set(self, key: str, value: SessionValue) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
