"""
Package-wide state.

``the`` is built when this module is imported. Reloading the module
(``importlib.reload``) builds a new instance, so every load starts from the
same declared entries and nothing written before the reload survives.
"""

from typing import Any, Iterable, List

import structlog

from .constants import (
    DEFAULT_FAVORITE_LETTERS,
    FAVORITE_LETTERS_KEY,
    REMOTE_IDENTIFIER_KEY,
)
from .services.cache.process_cache import ProcessCache
from .services.lookups.identity import RemoteIdentityClient

logger = structlog.get_logger(__name__)


def _resolve_remote_identifier() -> str:
    return RemoteIdentityClient.from_settings().fetch_identifier()


def build_state() -> ProcessCache:
    """Create the package state with its initial entries."""
    cache = ProcessCache(name="pkgstate")
    cache.declare(FAVORITE_LETTERS_KEY, default=list(DEFAULT_FAVORITE_LETTERS))
    cache.declare(REMOTE_IDENTIFIER_KEY, compute=_resolve_remote_identifier)
    return cache


the = build_state()
logger.debug("Package state loaded", keys=the.keys())


def favorite_letters() -> List[str]:
    return the.get(FAVORITE_LETTERS_KEY)


def set_favorite_letters(letters: Iterable[str]) -> Any:
    """Replace the favorite letters. Returns the previous letters."""
    return the.set(FAVORITE_LETTERS_KEY, list(letters))


def remote_identifier() -> str:
    """The remote identifier, looked up on first use and then memoized."""
    return the.get(REMOTE_IDENTIFIER_KEY)


def reset_state() -> None:
    the.reset()
