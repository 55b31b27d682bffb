"""Document store adapters."""

from geohunt.stores.base import QuestionStore, TeamStore
from geohunt.stores.json_file import JsonFileStore
from geohunt.stores.memory import InMemoryStore

__all__ = ["QuestionStore", "TeamStore", "JsonFileStore", "InMemoryStore"]
