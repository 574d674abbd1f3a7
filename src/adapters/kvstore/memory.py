"""
In-memory key-value store adapter - Implements KeyValueStore protocol.

Used for tests and for hosts that do not need data to survive a restart.
"""


class InMemoryKeyValueStore:
    """Implements KeyValueStore protocol with a plain dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
