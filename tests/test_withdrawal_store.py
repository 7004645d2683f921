import uuid
from decimal import Decimal

import pytest

from ledger.core.exceptions import InvalidTransition, NotFound
from ledger.models.withdrawal import WithdrawalStatus
from ledger.services.withdrawal_store import WithdrawalRequestStore


@pytest.fixture
def store(db):
    return WithdrawalRequestStore(db)


async def test_create_is_pending(store, seller):
    request = await store.create(seller.id, "250")

    assert request.status == WithdrawalStatus.PENDING.value
    assert request.amount == Decimal("250.00")
    assert request.resolved_at is None
    assert not request.is_terminal


async def test_resolve_completed_records_reference(store, seller):
    request = await store.create(seller.id, "250")

    await store.resolve(request, WithdrawalStatus.COMPLETED, payout_reference="UTR-001")

    assert request.status == WithdrawalStatus.COMPLETED.value
    assert request.payout_reference == "UTR-001"
    assert request.resolved_at is not None


async def test_resolve_accepts_lowercase_outcome(store, seller):
    request = await store.create(seller.id, "10")

    await store.resolve(request, "rejected", note="bank details missing")

    assert request.status == WithdrawalStatus.REJECTED.value
    assert request.resolution_note == "bank details missing"


async def test_second_resolution_raises(store, seller):
    request = await store.create(seller.id, "10")
    await store.resolve(request, WithdrawalStatus.COMPLETED)

    with pytest.raises(InvalidTransition):
        await store.resolve(request, WithdrawalStatus.REJECTED)
    assert request.status == WithdrawalStatus.COMPLETED.value


async def test_pending_is_not_a_valid_outcome(store, seller):
    request = await store.create(seller.id, "10")

    with pytest.raises(InvalidTransition):
        await store.resolve(request, WithdrawalStatus.PENDING)


async def test_sum_and_list_by_status(store, seller):
    first = await store.create(seller.id, "100")
    await store.create(seller.id, "50")
    await store.resolve(first, WithdrawalStatus.COMPLETED)

    assert await store.sum_amounts(seller.id, WithdrawalStatus.PENDING) == Decimal("50.00")
    assert await store.sum_amounts(seller.id, WithdrawalStatus.COMPLETED) == Decimal("100.00")
    assert await store.sum_amounts(seller.id, WithdrawalStatus.REJECTED) == Decimal("0")
    assert len(await store.list_for_seller(seller.id)) == 2
    assert len(await store.list_for_seller(seller.id, status="PENDING")) == 1


async def test_get_unknown_request_raises_not_found(store):
    with pytest.raises(NotFound):
        await store.get(uuid.uuid4())
