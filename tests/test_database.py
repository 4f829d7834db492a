import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from fake_firestore import FakeFirestore
from pitchgen.database import PitchStore
from pitchgen.errors import PersistenceError
from pitchgen.models import PitchInput


class _TickingClock:
    """Stands in for datetime so every record gets a distinct created_at."""

    def __init__(self):
        self._now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def now(self, tz=None):
        self._now += timedelta(seconds=1)
        return self._now.astimezone(tz) if tz else self._now


def make_store():
    client = FakeFirestore()
    return PitchStore(client=client), client


def create(store, owner_id, title, pitch="Generated"):
    input_data = PitchInput(problem="p", solution="s", target_audience="a")
    return asyncio.run(store.create(owner_id, title, input_data, pitch))


def test_connect_is_idempotent():
    with patch("pitchgen.database.firestore.Client") as client_cls:
        store = PitchStore(project="demo-project")
        first = store.connect()
        second = store.connect()
    assert first is second
    client_cls.assert_called_once_with(project="demo-project")


def test_connect_failure_raises_persistence_error():
    with patch("pitchgen.database.firestore.Client", side_effect=RuntimeError("no credentials")):
        store = PitchStore()
        with pytest.raises(PersistenceError):
            store.connect()


def test_create_stores_owned_record():
    store, client = make_store()
    record = create(store, "user-a", "My pitch", pitch="Pitch text")

    assert record.owner_id == "user-a"
    assert record.generated_pitch == "Pitch text"
    assert record.input_data.target_audience == "a"

    data, _ = client.docs[("users", "user-a", "pitches", record.id)]
    assert data["owner_id"] == "user-a"
    assert data["generated_pitch"] == "Pitch text"
    assert data["input_data"] == {"problem": "p", "solution": "s", "target_audience": "a"}


def test_created_at_is_utc_iso_timestamp():
    store, _ = make_store()
    record = create(store, "user-a", "My pitch")

    created = datetime.fromisoformat(record.created_at)
    assert created.utcoffset() == timedelta(0)
    assert record.created_at.endswith("+00:00")
    assert len(record.created_at) == len("2025-01-01T00:00:00.000000+00:00")


def test_list_by_owner_newest_first():
    store, _ = make_store()
    with patch("pitchgen.database.datetime", _TickingClock()):
        for i in range(5):
            create(store, "user-a", f"pitch {i}")
    create(store, "user-b", "someone else's")

    pitches = asyncio.run(store.list_by_owner("user-a"))

    assert [p.title for p in pitches] == [f"pitch {i}" for i in reversed(range(5))]
    created = [p.created_at for p in pitches]
    assert created == sorted(created, reverse=True)
    assert all(p.owner_id == "user-a" for p in pitches)


def test_list_by_owner_caps_at_fifty():
    store, client = make_store()
    base = datetime(2025, 1, 1)
    for i in range(60):
        client.put_pitch("user-a", f"id-{i:02d}", (base + timedelta(minutes=i)).isoformat())

    pitches = asyncio.run(store.list_by_owner("user-a"))
    assert len(pitches) == 50
    assert pitches[0].id == "id-59"
    assert pitches[-1].id == "id-10"

    assert len(asyncio.run(store.list_by_owner("user-a", limit=500))) == 50
    assert len(asyncio.run(store.list_by_owner("user-a", limit=3))) == 3


def test_delete_if_owned_removes_record():
    store, client = make_store()
    record = create(store, "user-a", "mine")

    assert asyncio.run(store.delete_if_owned("user-a", record.id)) is True
    assert asyncio.run(store.list_by_owner("user-a")) == []
    assert client.deletes == 1


def test_delete_missing_record_is_not_found():
    store, client = make_store()
    assert asyncio.run(store.delete_if_owned("user-a", "does-not-exist")) is False
    assert client.deletes == 0


def test_delete_other_owners_record_is_not_found():
    store, client = make_store()
    record = create(store, "user-b", "theirs")

    assert asyncio.run(store.delete_if_owned("user-a", record.id)) is False
    assert client.deletes == 0
    remaining = asyncio.run(store.list_by_owner("user-b"))
    assert [p.id for p in remaining] == [record.id]


def test_delete_checks_stored_owner_field():
    store, client = make_store()
    client.put_pitch("user-a", "planted", "2025-01-01T00:00:00", stored_owner="user-b")

    assert asyncio.run(store.delete_if_owned("user-a", "planted")) is False
    assert ("users", "user-a", "pitches", "planted") in client.docs


def test_delete_after_concurrent_change_is_not_found():
    store, client = make_store()
    record = create(store, "user-a", "mine")
    path = ("users", "user-a", "pitches", record.id)

    real_write_option = client.write_option

    def write_option(last_update_time=None):
        # Simulate another writer touching the document after the ownership check
        client.write(path, dict(client.docs[path][0]))
        return real_write_option(last_update_time=last_update_time)

    client.write_option = write_option
    assert asyncio.run(store.delete_if_owned("user-a", record.id)) is False
    assert path in client.docs


def test_store_errors_become_persistence_errors():
    client = MagicMock()
    client.collection.side_effect = RuntimeError("unavailable")
    store = PitchStore(client=client)

    with pytest.raises(PersistenceError):
        asyncio.run(store.list_by_owner("user-a"))
    with pytest.raises(PersistenceError):
        asyncio.run(store.delete_if_owned("user-a", "x"))
    with pytest.raises(PersistenceError):
        create(store, "user-a", "t")
