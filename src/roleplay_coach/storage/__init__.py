from .progress_store import DEFAULT_STORAGE_KEY, InMemoryProgressStore, JsonProgressStore, ProgressStore

__all__ = ["DEFAULT_STORAGE_KEY", "InMemoryProgressStore", "JsonProgressStore", "ProgressStore"]
