"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class Database(ABC):
    """Abstract key-value snapshot store for pocketledger.

    Values are JSON-compatible structures. The ledger loads every key once on
    start-up and writes all of them back after each mutation.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Get the value stored under a key, or None if absent."""
        pass

    @abstractmethod
    def save_many(self, values: Mapping[str, Any]) -> None:
        """Store several keys in a single transaction."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""
        pass
