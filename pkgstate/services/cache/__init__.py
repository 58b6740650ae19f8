from .process_cache import ProcessCache, memoized

__all__ = ["ProcessCache", "memoized"]
