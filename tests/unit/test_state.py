"""QueryStateStore 테스트"""

import pytest

from storefront_query.engine.state import QueryStateSnapshot, QueryStateStore
from storefront_query.schemas.catalog_schema import ResultSet
from tests.fakes import make_item


def test_update_notifies_subscribers():
    store = QueryStateStore()
    seen = []
    store.subscribe(seen.append)

    store.update(loading=True)

    assert len(seen) == 1
    assert seen[0].loading is True
    assert store.snapshot().loading is True


def test_unchanged_update_does_not_notify():
    store = QueryStateStore()
    seen = []
    store.subscribe(seen.append)

    store.update(loading=False)

    assert seen == []


def test_unsubscribe():
    store = QueryStateStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    unsubscribe()

    store.update(text="wine")
    assert seen == []


def test_unknown_field_rejected():
    store = QueryStateStore()
    with pytest.raises(AttributeError):
        store.update(spinner=True)


def test_listener_error_does_not_break_update():
    """구독자 예외는 격리됨"""
    store = QueryStateStore()
    seen = []

    def broken(snapshot):
        raise RuntimeError("render failed")

    store.subscribe(broken)
    store.subscribe(seen.append)
    store.update(text="beer")

    assert store.text == "beer"
    assert len(seen) == 1


def test_can_load_more_requires_idle_and_more_pages():
    result_set = ResultSet(items=(make_item(1),), page_number=1, has_more=True, total_items=10)
    store = QueryStateStore(QueryStateSnapshot(result_set=result_set))
    assert store.can_load_more() is True

    store.update(refreshing=True)
    assert store.can_load_more() is False

    store.update(refreshing=False, result_set=ResultSet(items=result_set.items, page_number=1))
    assert store.can_load_more() is False


def test_snapshots_are_immutable():
    store = QueryStateStore()
    before = store.snapshot()
    store.update(loading=True)

    assert before.loading is False
    with pytest.raises(Exception):
        before.loading = True
