"""Tests for StatusCache."""

from datetime import datetime, timedelta

from taskwatch.monitor.cache import StatusCache
from taskwatch.monitor.models import StatusSnapshot
from taskwatch.notion.models import StatusBucket


def snapshot(entity_id, label="Todo", checked=None):
    return StatusSnapshot(
        entity_id=entity_id,
        title=f"Task {entity_id}",
        raw_label=label,
        bucket=StatusBucket.TODO,
        last_checked=checked or datetime.now(),
    )


def test_empty_cache():
    cache = StatusCache()

    assert len(cache) == 0
    assert cache.get("r1") is None
    assert cache.last_checked() is None


def test_put_overwrites():
    cache = StatusCache()
    cache.put(snapshot("r1", "Todo"))
    cache.put(snapshot("r1", "Done"))

    assert len(cache) == 1
    assert cache.get("r1").raw_label == "Done"
    assert "r1" in cache


def test_clear():
    cache = StatusCache()
    cache.put(snapshot("r1"))
    cache.put(snapshot("r2"))

    cache.clear()

    assert len(cache) == 0
    assert "r1" not in cache


def test_last_checked_is_most_recent():
    now = datetime.now()
    cache = StatusCache()
    cache.put(snapshot("r1", checked=now - timedelta(minutes=5)))
    cache.put(snapshot("r2", checked=now))

    assert cache.last_checked() == now
    assert {s.entity_id for s in cache.snapshots()} == {"r1", "r2"}
