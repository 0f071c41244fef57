import pytest

from app.services.deletion_diff import compute_deletions, reconcile_deletions


def test_compute_deletions_is_set_difference():
    assert compute_deletions(["A", "B", "C"], ["B", "D"]) == ["A", "C"]


def test_compute_deletions_never_touches_current_skus():
    assert compute_deletions(["A", "B"], ["A", "B", "C"]) == []


def test_compute_deletions_dedupes_and_keeps_order():
    assert compute_deletions(["C", "A", "C", "B"], ["B"]) == ["C", "A"]


def test_compute_deletions_empty_current_removes_everything():
    assert compute_deletions(["A", "B"], []) == ["A", "B"]


@pytest.mark.asyncio
async def test_reconcile_deletions_removes_missing(product_store):
    product_store.seed("A", "B", "C")

    outcome = await reconcile_deletions(product_store, ["B"])

    assert outcome.requested == 2
    assert outcome.deleted == 2
    assert sorted(product_store.products) == ["B"]


@pytest.mark.asyncio
async def test_reconcile_deletions_nothing_to_do(product_store):
    product_store.seed("A")

    outcome = await reconcile_deletions(product_store, ["A"])

    assert outcome.requested == 0
    assert outcome.deleted == 0
    assert product_store.deleted_requests == []


@pytest.mark.asyncio
async def test_reconcile_deletions_reports_store_count(mocker):
    store = mocker.MagicMock()
    store.list_all_skus = mocker.AsyncMock(return_value=["A", "B", "C"])
    # One row vanished before the delete ran
    store.delete_by_skus = mocker.AsyncMock(return_value=1)

    outcome = await reconcile_deletions(store, [])

    store.delete_by_skus.assert_awaited_once_with(["A", "B", "C"])
    assert outcome.requested == 3
    assert outcome.deleted == 1
