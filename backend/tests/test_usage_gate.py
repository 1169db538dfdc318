"""Daily free-analysis gate."""

import json
from datetime import date

import pytest

from workplace_inspector.client.storage import InMemoryStore
from workplace_inspector.client.usage import (
    DAILY_KEY,
    UPGRADE_MESSAGE,
    DailyUsage,
    UsageGate,
    UsageLimitReached,
    today_key,
)


class FakeToday:
    def __init__(self, day: date) -> None:
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture
def today():
    return FakeToday(date(2026, 3, 14))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def gate(store, today):
    return UsageGate(store, today=today)


def test_fresh_store_allows_two(gate):
    assert gate.load() == DailyUsage(date="2026-03-14", count=0)
    assert gate.remaining_today() == 2
    gate.check()


def test_two_successes_exhaust_the_day(gate, store):
    gate.check()
    gate.record_success()
    gate.check()
    usage = gate.record_success()

    assert usage.count == 2
    assert json.loads(store.get(DAILY_KEY)) == {"date": "2026-03-14", "count": 2}
    assert gate.is_exhausted()
    with pytest.raises(UsageLimitReached) as excinfo:
        gate.check()
    assert excinfo.value.message == UPGRADE_MESSAGE
    assert excinfo.value.count == 2


def test_new_day_resets_the_counter(gate, store, today):
    gate.record_success()
    gate.record_success()

    today.day = date(2026, 3, 15)

    gate.check()
    assert json.loads(store.get(DAILY_KEY)) == {"date": "2026-03-15", "count": 0}
    assert gate.record_success().count == 1


def test_record_success_after_rollover_starts_at_one(store, today):
    store.set(DAILY_KEY, json.dumps({"date": "2026-03-13", "count": 2}))

    usage = UsageGate(store, today=today).record_success()

    assert usage == DailyUsage(date="2026-03-14", count=1)


@pytest.mark.parametrize("raw", ["not json", "[]", '{"date": "2026-03-14", "count": "many"}'])
def test_corrupt_state_is_treated_as_zero(store, today, raw):
    store.set(DAILY_KEY, raw)

    assert UsageGate(store, today=today).remaining_today() == 2


def test_custom_limit(store, today):
    gate = UsageGate(store, limit=1, today=today)
    gate.record_success()

    assert gate.remaining_today() == 0
    with pytest.raises(UsageLimitReached):
        gate.check()


def test_today_key_format():
    assert today_key(date(2026, 1, 5)) == "2026-01-05"
