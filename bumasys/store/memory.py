"""In-memory store used by the test suite and the ``testing`` config."""

from bumasys.store.base import Store, empty_collections


class MemoryStore(Store):
    """Keeps collections in a dict; ``persist`` only counts flushes."""

    def __init__(self, data: dict[str, list] | None = None):
        self._data = empty_collections()
        if data:
            for name, records in data.items():
                self.get(name).extend(records)
        self.persist_count = 0

    def get(self, collection: str) -> list[dict]:
        return self._data[collection]

    def persist(self) -> None:
        self.persist_count += 1
