"""
Token-based memoization for the render phase.

A field's render depends only on the item (tracked by the store's change
token) and a few session flags. Bundling those into a token lets repeated
renders within one update cycle reuse the previous result instead of
re-running predicates and validators.
"""

from typing import TypeVar, Generic, Callable, Tuple, Any, Hashable
from dataclasses import dataclass

T = TypeVar('T')

_MISSING = object()


@dataclass(frozen=True)
class CacheKey:
    """Immutable cache key that can include multiple components."""
    components: Tuple[Any, ...]

    @classmethod
    def from_args(cls, *args) -> 'CacheKey':
        """Create cache key from variable arguments."""
        return cls(components=args)


class SingleValueTokenCache(Generic[T]):
    """
    Cache for one value that stays valid while its token is unchanged.

    Example:
        cache = SingleValueTokenCache(lambda: CacheKey.from_args(store.token, flag))
        descriptor = cache.get_or_compute(lambda: compute_descriptor())
    """

    def __init__(self, token_provider: Callable[[], Hashable]):
        """
        Initialize single-value token cache.

        Args:
            token_provider: Function that returns the current token
        """
        self._token_provider = token_provider
        self._cached_value: Any = _MISSING
        self._cached_token: Any = _MISSING

    def get_or_compute(self, compute_fn: Callable[[], T]) -> T:
        """
        Get cached value or compute and cache it.

        Args:
            compute_fn: Function to compute value on a cache miss

        Returns:
            Cached or computed value
        """
        current_token = self._token_provider()

        if self._cached_value is not _MISSING and current_token == self._cached_token:
            return self._cached_value

        value = compute_fn()
        self._cached_value = value
        self._cached_token = current_token
        return value

    @property
    def is_valid(self) -> bool:
        """True if a cached value exists for the current token."""
        return self._cached_value is not _MISSING and self._token_provider() == self._cached_token

    def invalidate(self):
        """Manually invalidate the cache."""
        self._cached_value = _MISSING
        self._cached_token = _MISSING
