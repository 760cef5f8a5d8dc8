"""Key/value persistence media for visitor-side enquiry state.

Values are JSON strings, mirroring what a browser keeps in local or session
storage. A medium that is not ``available`` makes its users degrade to empty,
no-op behaviour.
"""
from abc import ABC, abstractmethod

from flask import has_request_context, session


class Storage(ABC):
    available = True

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage(Storage):
    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get_item(self, key):
        return self._data.get(key)

    def set_item(self, key, value):
        self._data[key] = value

    def remove_item(self, key):
        self._data.pop(key, None)


class UnavailableStorage(Storage):
    available = False

    def get_item(self, key):
        return None

    def set_item(self, key, value):
        pass

    def remove_item(self, key):
        pass


class SessionStorage(Storage):
    """Backed by the signed Flask session cookie of the current visitor."""

    @property
    def available(self):
        return has_request_context()

    def get_item(self, key):
        if not self.available:
            return None
        return session.get(key)

    def set_item(self, key, value):
        if self.available:
            session[key] = value

    def remove_item(self, key):
        if self.available:
            session.pop(key, None)
