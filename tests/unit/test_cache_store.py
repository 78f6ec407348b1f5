"""LocalCacheStore 단위 테스트."""

from __future__ import annotations

import json

import pytest

from catalog_client.core.exceptions import CacheConnectionException
from catalog_client.core.seeds import SEED_CATEGORIES, SEED_IDS
from catalog_client.repositories.storage import MemoryStorage
from catalog_client.schemas.catalog_schema import CatalogEntity
from catalog_client.services.impl.cache_store import LocalCacheStore
from tests.fixtures import CACHE_CASES
from tests.fixtures.cache_cases import SEED_TABLES_ID

KEY = "localCategories"


def _store(raw: str | None = None) -> LocalCacheStore:
    storage = MemoryStorage({KEY: raw} if raw is not None else None)
    return LocalCacheStore(storage, KEY)


def _ids(entities) -> list[str]:
    return [e.id for e in entities]


def test_empty_storage_returns_exactly_seeds():
    entities = _store().get_all()

    assert _ids(entities) == [seed["id"] for seed in SEED_CATEGORIES]
    assert all(e.is_seed for e in entities)


@pytest.mark.parametrize("case", ["empty_string", "malformed_json", "not_a_list", "deeply_nested"])
def test_corrupted_storage_degrades_to_seeds(case):
    entities = _store(CACHE_CASES[case]).get_all()
    assert set(_ids(entities)) == SEED_IDS


def test_unavailable_storage_degrades_to_seeds(broken_storage):
    entities = LocalCacheStore(broken_storage, KEY).get_all()
    assert set(_ids(entities)) == SEED_IDS


def test_user_records_follow_seeds():
    entities = _store(CACHE_CASES["valid_user_records"]).get_all()

    assert _ids(entities)[-2:] == ["user-1", "user-2"]
    assert SEED_IDS <= set(_ids(entities))
    assert not entities[-1].is_seed
    assert entities[-2].label == "Lamps"
    assert entities[-1].label == "rugs"


def test_conflicting_seed_record_does_not_override_canonical_fields():
    entities = _store(CACHE_CASES["conflicting_seed"]).get_all()
    tables = [e for e in entities if e.id == SEED_TABLES_ID]

    assert len(tables) == 1
    assert tables[0].name == "tables"
    assert tables[0].display_name == "Tables"
    assert "user-1" in _ids(entities)


def test_partially_malformed_records_are_skipped():
    entities = _store(CACHE_CASES["partially_malformed"]).get_all()
    assert _ids(entities)[len(SEED_CATEGORIES):] == ["user-1", "user-3"]


def test_put_upserts_last_write_wins():
    store = _store()
    store.put(CatalogEntity(id="user-1", name="lamps"))
    store.put(CatalogEntity(id="user-2", name="rugs"))
    store.put(CatalogEntity(id="user-1", name="lamps", displayName="Floor Lamps"))

    entities = store.get_all()
    user = [e for e in entities if not e.is_seed]

    assert _ids(user) == ["user-1", "user-2"]
    assert user[0].display_name == "Floor Lamps"


def test_put_persists_flat_records_with_updated_at():
    storage = MemoryStorage()
    store = LocalCacheStore(storage, KEY)
    store.put(CatalogEntity(id="user-1", name="lamps", displayName="Lamps"))

    raw = json.loads(storage.read(KEY))
    assert raw[0]["id"] == "user-1"
    assert raw[0]["displayName"] == "Lamps"
    assert raw[0]["updatedAt"]
    assert "is_seed" not in raw[0]


def test_put_with_seed_id_is_stored_but_seed_wins_on_read():
    storage = MemoryStorage()
    store = LocalCacheStore(storage, KEY)
    store.put(CatalogEntity(id=SEED_TABLES_ID, name="renamed", displayName="Renamed"))

    assert json.loads(storage.read(KEY))[0]["name"] == "renamed"
    tables = store.get(SEED_TABLES_ID)
    assert tables.name == "tables"
    assert tables.is_seed


def test_put_on_corrupted_storage_starts_fresh():
    storage = MemoryStorage({KEY: CACHE_CASES["malformed_json"]})
    store = LocalCacheStore(storage, KEY)
    store.put(CatalogEntity(id="user-9", name="benches"))

    assert [r["id"] for r in json.loads(storage.read(KEY))] == ["user-9"]


def test_put_on_unavailable_storage_raises(broken_storage):
    store = LocalCacheStore(broken_storage, KEY)
    with pytest.raises(CacheConnectionException):
        store.put(CatalogEntity(id="user-1", name="lamps"))


def test_remove_user_record():
    store = _store(CACHE_CASES["valid_user_records"])
    store.remove("user-1")
    assert "user-1" not in _ids(store.get_all())
    assert "user-2" in _ids(store.get_all())


def test_remove_seed_is_noop():
    storage = MemoryStorage({KEY: CACHE_CASES["conflicting_seed"]})
    store = LocalCacheStore(storage, KEY)
    before = storage.read(KEY)

    store.remove(SEED_TABLES_ID)

    assert storage.read(KEY) == before
    assert SEED_TABLES_ID in _ids(store.get_all())


def test_get_all_returns_independent_snapshots():
    store = _store(CACHE_CASES["valid_user_records"])
    first = store.get_all()
    first[0].name = "mutated"
    first.pop()

    second = store.get_all()
    assert second[0].name == SEED_CATEGORIES[0]["name"]
    assert len(second) == len(SEED_CATEGORIES) + 2
