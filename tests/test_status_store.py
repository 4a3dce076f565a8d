import json
from datetime import date

import pytest

from paydash.core.schedule import InvalidStatus, PaymentStatus, set_status
from paydash.core.storage import OVERRIDES_KEY, JsonFileStore, MemoryStore, OverrideStore


def test_set_status_returns_new_map():
    original = {"2025-10-31": "due"}
    updated = set_status(original, date(2025, 11, 14), "paid")
    assert updated == {"2025-10-31": "due", "2025-11-14": "paid"}
    assert original == {"2025-10-31": "due"}


def test_set_status_overwrites_existing_entry():
    updated = set_status({"2025-11-14": "paid"}, "2025-11-14", PaymentStatus.NOTHING)
    assert updated == {"2025-11-14": "nothing"}


@pytest.mark.parametrize("bad", ["late", "", "Paid", None, 1])
def test_set_status_rejects_unknown_status(bad):
    overrides = {"2025-11-14": "paid"}
    with pytest.raises(InvalidStatus) as excinfo:
        set_status(overrides, "2025-11-14", bad)
    assert excinfo.value.value == bad
    assert overrides == {"2025-11-14": "paid"}


def test_set_status_accepts_dates_outside_schedule():
    assert set_status({}, "1999-01-01", "due") == {"1999-01-01": "due"}


def test_override_store_round_trip_in_memory():
    store = OverrideStore(MemoryStore())
    assert store.load() == {}
    store.set_status(date(2025, 11, 14), "paid")
    store.set_status("2025-11-28", "due")
    assert store.load() == {"2025-11-14": "paid", "2025-11-28": "due"}
    assert json.loads(store.store.get(OVERRIDES_KEY)) == {"2025-11-14": "paid", "2025-11-28": "due"}


def test_override_store_fails_closed_on_corrupt_value():
    store = OverrideStore(MemoryStore({OVERRIDES_KEY: "{corrupt"}))
    assert store.load() == {}


def test_override_store_rejects_invalid_status_without_writing():
    backing = MemoryStore({OVERRIDES_KEY: '{"2025-11-14": "paid"}'})
    store = OverrideStore(backing)
    with pytest.raises(InvalidStatus):
        store.set_status("2025-11-14", "refunded")
    assert backing.get(OVERRIDES_KEY) == '{"2025-11-14": "paid"}'


def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "state" / "statuses.json"
    OverrideStore(JsonFileStore(path)).set_status("2025-11-14", "paid")

    reopened = OverrideStore(JsonFileStore(path))
    assert reopened.load() == {"2025-11-14": "paid"}


def test_json_file_store_unreadable_file_loads_empty(tmp_path):
    path = tmp_path / "statuses.json"
    path.write_text("not json", encoding="utf-8")
    store = OverrideStore(JsonFileStore(path))
    assert store.load() == {}

    store.set_status("2025-11-14", "due")
    assert store.load() == {"2025-11-14": "due"}
