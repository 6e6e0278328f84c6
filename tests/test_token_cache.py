"""Tests for token-based render memoization."""
from formstate import CacheKey, SingleValueTokenCache


def test_cache_key_equality():
    """Keys built from equal components are equal and hash alike."""
    assert CacheKey.from_args(1, 'a') == CacheKey.from_args(1, 'a')
    assert hash(CacheKey.from_args(1, 'a')) == hash(CacheKey.from_args(1, 'a'))
    assert CacheKey.from_args(1, 'a') != CacheKey.from_args(2, 'a')


def test_reuses_value_while_token_unchanged():
    """compute_fn runs once per token."""
    token = [0]
    calls = []
    cache = SingleValueTokenCache(lambda: token[0])

    def compute():
        calls.append(token[0])
        return f"value-{token[0]}"

    assert cache.get_or_compute(compute) == "value-0"
    assert cache.get_or_compute(compute) == "value-0"
    assert calls == [0]

    token[0] = 1
    assert not cache.is_valid
    assert cache.get_or_compute(compute) == "value-1"
    assert calls == [0, 1]


def test_caches_none_values():
    """None is a legitimate cached value."""
    calls = []
    cache = SingleValueTokenCache(lambda: 'token')

    def compute():
        calls.append(1)
        return None

    assert cache.get_or_compute(compute) is None
    assert cache.get_or_compute(compute) is None
    assert calls == [1]


def test_invalidate_forces_recompute():
    """Manual invalidation drops the cached value."""
    calls = []
    cache = SingleValueTokenCache(lambda: 'token')
    cache.get_or_compute(lambda: calls.append(1))
    assert cache.is_valid
    cache.invalidate()
    assert not cache.is_valid
    cache.get_or_compute(lambda: calls.append(1))
    assert calls == [1, 1]
