"""Local history cache: newest first, capped, reopenable."""

import json
from itertools import count

import pytest

from workplace_inspector.client.history import HISTORY_KEY, HistoryCache, HistoryItem
from workplace_inspector.client.storage import InMemoryStore
from workplace_inspector.services.ai.vision.contracts import AnalysisMode, AnalysisResult, RiskLevel
from workplace_inspector.services.ai.vision.service import parse_analysis


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def cache(store):
    ticks = count(1_700_000_000_000, 1000)
    return HistoryCache(store, clock_ms=lambda: next(ticks))


def _result(label: str, risk: RiskLevel = RiskLevel.LOW) -> AnalysisResult:
    return AnalysisResult(what_i_see=label, risk_level=risk, raw=f"[WHAT_I_SEE]\n{label}")


def test_add_result_stores_newest_first(cache):
    first = cache.add_result(_result("first"), AnalysisMode.KITCHEN)
    second = cache.add_result(_result("second"), AnalysisMode.OFFICE)

    items = cache.list()
    assert [i.id for i in items] == [second.id, first.id]
    assert items[0].mode is AnalysisMode.OFFICE
    assert items[0].created_at > items[1].created_at


def test_cache_is_capped_at_twenty(cache):
    added = [cache.add_result(_result(f"photo {n}"), AnalysisMode.WAREHOUSE) for n in range(21)]

    items = cache.list()
    assert len(items) == 20
    assert items[0].id == added[-1].id
    assert added[0].id not in {i.id for i in items}


def test_stored_entries_use_camel_case(cache, store, sample_reply):
    cache.add_result(parse_analysis(sample_reply), AnalysisMode.KITCHEN, image_data_url="data:image/webp;base64,AA==")

    (entry,) = json.loads(store.get(HISTORY_KEY))
    assert entry["riskLevel"] == "HIGH"
    assert entry["mode"] == "kitchen"
    assert entry["imageDataUrl"] == "data:image/webp;base64,AA=="
    assert entry["createdAt"] == 1_700_000_000_000
    assert entry["id"].startswith("1700000000000_")


def test_reopen_restores_result_and_mode(cache, sample_reply):
    result = parse_analysis(sample_reply)
    item = cache.add_result(result, AnalysisMode.KITCHEN, image_data_url="data:image/webp;base64,AA==")

    reopened = cache.reopen(item.id)

    assert reopened is not None
    assert reopened.mode is AnalysisMode.KITCHEN
    assert reopened.result == result
    assert reopened.image_data_url == "data:image/webp;base64,AA=="
    assert reopened.created_at == item.created_at


def test_reopen_unknown_id(cache):
    assert cache.reopen("missing") is None


def test_clear_removes_everything(cache, store):
    cache.add_result(_result("x"), AnalysisMode.KITCHEN)

    cache.clear()

    assert cache.list() == []
    assert store.get(HISTORY_KEY) is None


def test_malformed_entries_are_skipped(store):
    good = HistoryItem(
        id="1_abc", created_at=1, mode=AnalysisMode.OFFICE, risk_level=RiskLevel.MEDIUM
    ).model_dump(by_alias=True, mode="json")
    store.set(HISTORY_KEY, json.dumps([{"id": "broken"}, good, "junk"]))

    items = HistoryCache(store).list()

    assert [i.id for i in items] == ["1_abc"]


@pytest.mark.parametrize("raw", ["{not json", '{"id": "x"}'])
def test_unreadable_history_is_empty(store, raw):
    store.set(HISTORY_KEY, raw)

    assert HistoryCache(store).list() == []


def test_custom_limit_applies_on_append(store):
    cache = HistoryCache(store, limit=2)
    for n in range(3):
        cache.add_result(_result(str(n)), AnalysisMode.KITCHEN)

    assert [i.what_i_see for i in cache.list()] == ["2", "1"]
