"""PageAccumulator 테스트"""

from storefront_query.engine.accumulator import PageAccumulator
from storefront_query.schemas.catalog_schema import PageMode, ResultSet
from tests.fakes import make_page


accumulator = PageAccumulator()


def test_replace_installs_new_baseline():
    current = accumulator.apply(ResultSet.empty(), make_page(1, 3, ids=[1, 2]), PageMode.REPLACE)
    replaced = accumulator.apply(current, make_page(1, 1, ids=[9]), PageMode.REPLACE)

    assert replaced.item_ids == ["9"]
    assert replaced.page_number == 1
    assert replaced.has_more is False


def test_append_extends_in_arrival_order():
    first = accumulator.apply(ResultSet.empty(), make_page(1, 3), PageMode.REPLACE)
    second = accumulator.apply(first, make_page(2, 3), PageMode.APPEND)

    assert len(second) == 8
    assert second.item_ids == [str(i) for i in range(8)]
    assert second.page_number == 2
    assert second.has_more is True


def test_append_same_page_twice_is_idempotent():
    """같은 페이지를 두 번 반영해도 한 번과 동일"""
    first = accumulator.apply(ResultSet.empty(), make_page(1, 3), PageMode.REPLACE)
    once = accumulator.apply(first, make_page(2, 3), PageMode.APPEND)
    twice = accumulator.apply(once, make_page(2, 3), PageMode.APPEND)

    assert twice.item_ids == once.item_ids
    assert twice.page_number == once.page_number
    assert twice.has_more == once.has_more


def test_append_skips_duplicate_ids():
    first = accumulator.apply(ResultSet.empty(), make_page(1, 3, ids=[1, 2]), PageMode.REPLACE)
    merged = accumulator.apply(first, make_page(2, 3, ids=[2, 3]), PageMode.APPEND)

    assert merged.item_ids == ["1", "2", "3"]


def test_last_page_clears_has_more():
    first = accumulator.apply(ResultSet.empty(), make_page(1, 2), PageMode.REPLACE)
    last = accumulator.apply(first, make_page(2, 2), PageMode.APPEND)

    assert last.has_more is False


def test_empty_append_page_ends_pagination():
    first = accumulator.apply(ResultSet.empty(), make_page(1, 5), PageMode.REPLACE)
    empty = accumulator.apply(first, make_page(2, 5, ids=[]), PageMode.APPEND)

    assert empty.item_ids == first.item_ids
    assert empty.has_more is False


def test_empty_replace_result():
    result = accumulator.apply(ResultSet.empty(), make_page(1, 0, ids=[]), PageMode.REPLACE)

    assert len(result) == 0
    assert result.has_more is False


def test_failure_policy():
    """APPEND 실패는 목록 유지, REPLACE 실패는 비움"""
    current = accumulator.apply(ResultSet.empty(), make_page(1, 3), PageMode.REPLACE)

    assert accumulator.on_failure(current, PageMode.APPEND) is current
    assert accumulator.on_failure(current, PageMode.REPLACE) == ResultSet.empty()


def test_append_uses_requested_page_number():
    """응답의 page 가 1 로 잘못 와도 요청 페이지 기준으로 이어 붙임"""
    first = accumulator.apply(ResultSet.empty(), make_page(1, 3), PageMode.REPLACE, requested_page=1)
    echoed_wrong = make_page(1, 3, ids=[10, 11])

    merged = accumulator.apply(first, echoed_wrong, PageMode.APPEND, requested_page=2)
    again = accumulator.apply(merged, echoed_wrong, PageMode.APPEND, requested_page=2)

    assert merged.item_ids == ["0", "1", "2", "3", "10", "11"]
    assert merged.page_number == 2
    assert merged.has_more is True
    assert again.item_ids == merged.item_ids
