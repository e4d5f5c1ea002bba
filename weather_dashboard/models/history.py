from __future__ import annotations

from collections.abc import Iterable

DEFAULT_HISTORY_SIZE = 10


class SearchHistory:
    """Most-recent-first list of searched city names.

    Names compare case-insensitively; re-adding a name moves it to the front.
    """

    def __init__(
        self, entries: Iterable[str] = (), *, max_entries: int = DEFAULT_HISTORY_SIZE
    ) -> None:
        self._max_entries = max(int(max_entries), 1)
        self._entries: list[str] = []
        # Loaded entries are oldest-last already; replay them from the back.
        for name in reversed(list(entries)):
            self.add(name)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def add(self, city: str) -> None:
        city = city.strip()
        if not city:
            return
        key = city.casefold()
        self._entries = [e for e in self._entries if e.casefold() != key]
        self._entries.insert(0, city)
        del self._entries[self._max_entries :]

    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    def __contains__(self, city: object) -> bool:
        if not isinstance(city, str):
            return False
        key = city.casefold()
        return any(e.casefold() == key for e in self._entries)
