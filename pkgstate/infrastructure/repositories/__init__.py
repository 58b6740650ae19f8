from .memory_repository import InMemoryEntryRepository

__all__ = ["InMemoryEntryRepository"]
