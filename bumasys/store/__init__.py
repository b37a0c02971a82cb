"""Entity stores: the contract, an in-memory fake, and JSON-file backends."""

from bumasys.store.base import Store
from bumasys.store.json_store import JsonFileStore
from bumasys.store.manager import DatabaseManager
from bumasys.store.memory import MemoryStore

__all__ = ["Store", "MemoryStore", "JsonFileStore", "DatabaseManager"]
