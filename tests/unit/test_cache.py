# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from pathlib import Path

import pytest

from rca.cache import CacheError, MemoryRepoCache
from rca.database import SQLiteRepoCache


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_ph11_cache_001_memory_cache_expires_after_one_hour() -> None:
    clock = _Clock()
    cache = MemoryRepoCache(clock=clock)
    cache.set("octo/app", {"owner": "octo"})

    clock.now += 3599
    assert cache.get("octo/app") == {"owner": "octo"}
    clock.now += 1
    assert cache.get("octo/app") is None
    assert cache.size() == 0


def test_ph11_cache_002_memory_cache_evicts_oldest_entry_first() -> None:
    cache = MemoryRepoCache(max_entries=2, clock=_Clock())
    cache.set("a/one", {"n": 1})
    cache.set("b/two", {"n": 2})
    cache.set("a/one", {"n": 11})
    cache.set("c/three", {"n": 3})

    assert cache.get("b/two") is None
    assert cache.get("a/one") == {"n": 11}
    assert cache.get("c/three") == {"n": 3}
    assert cache.size() == 2
    cache.clear()
    assert cache.size() == 0


def test_ph11_cache_003_memory_cache_rejects_invalid_size() -> None:
    with pytest.raises(ValueError):
        MemoryRepoCache(max_entries=0)


def test_ph11_cache_004_sqlite_cache_round_trips_and_expires(tmp_path: Path) -> None:
    clock = _Clock()
    db_path = tmp_path / "cache.sqlite"
    cache = SQLiteRepoCache(db_path=db_path, clock=clock)

    assert cache.get("octo/app") is None
    cache.set("octo/app", {"files": [{"path": "a.py", "size": 1}]})
    assert SQLiteRepoCache(db_path=db_path, clock=clock).get("octo/app") == {
        "files": [{"path": "a.py", "size": 1}]
    }
    assert cache.size() == 1

    clock.now += 3600
    assert cache.get("octo/app") is None
    assert cache.size() == 0


def test_ph11_cache_005_sqlite_cache_clear_and_serialization_errors(tmp_path: Path) -> None:
    cache = SQLiteRepoCache(db_path=tmp_path / "cache.sqlite")
    cache.set("a/b", {"n": 1})
    cache.set("c/d", {"n": 2})
    cache.clear()

    assert cache.size() == 0
    with pytest.raises(CacheError):
        cache.set("a/b", {"bad": object()})
