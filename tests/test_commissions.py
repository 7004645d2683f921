"""Recording, voiding and reversing commission through the ledger facade."""
from decimal import Decimal

import pytest

from ledger.core.exceptions import InvalidAmount, InvalidTransition, NotFound
from ledger.models.commission import CommissionStatus, CommissionType


async def test_prepaid_commission_is_available_immediately(ledger, seller):
    event = await ledger.record_earned_commission(seller.id, "PRE-1", "99.99", confirmed=True)

    assert event.status == CommissionStatus.CONFIRMED.value
    assert event.description == "Commission for order PRE-1"
    assert await ledger.get_available_balance(seller.id) == Decimal("99.99")


async def test_duplicate_commission_for_order_is_rejected(ledger, seller):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "ORD-1", "10")

    with pytest.raises(InvalidTransition):
        await ledger.record_earned_commission(seller_id, "ORD-1", "10")

    assert len(await ledger.list_commissions(seller_id)) == 1


async def test_invalid_amount_is_not_persisted(ledger, seller):
    seller_id = seller.id

    with pytest.raises(InvalidAmount):
        await ledger.record_earned_commission(seller_id, "ORD-1", "-1")

    assert await ledger.list_commissions(seller_id) == []


async def test_void_removes_confirmed_commission_from_balance(ledger, funded_seller):
    seller_id = funded_seller.id

    voided = await ledger.void_order_commission("ORD-1000", reason="order cancelled", performed_by="ops")

    assert [e.status for e in voided] == [CommissionStatus.VOIDED.value]
    assert voided[0].void_reason == "order cancelled"
    assert await ledger.get_available_balance(seller_id) == Decimal("0.00")
    seller = await ledger.get_seller(seller_id)
    assert seller.available_commission == Decimal("0.00")


async def test_void_twice_and_unknown_order(ledger, funded_seller):
    await ledger.void_order_commission("ORD-1000")

    with pytest.raises(InvalidTransition):
        await ledger.void_order_commission("ORD-1000")
    with pytest.raises(NotFound):
        await ledger.void_order_commission("NO-SUCH-ORDER")


async def test_voided_order_can_be_recorded_again(ledger, seller):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "ORD-1", "10")
    await ledger.void_order_commission("ORD-1")

    event = await ledger.record_earned_commission(seller_id, "ORD-1", "12", confirmed=True)

    assert event.amount == Decimal("12.00")
    assert await ledger.get_available_balance(seller_id) == Decimal("12.00")


async def test_reversal_reduces_balance(ledger, funded_seller):
    event = await ledger.record_reversal(funded_seller.id, "ORD-1000", "250")

    assert event.type == CommissionType.REVERSED.value
    assert event.status == CommissionStatus.CONFIRMED.value
    breakdown = await ledger.get_balance_breakdown(funded_seller.id)
    assert breakdown.confirmed_reversed == Decimal("250.00")
    assert breakdown.available_balance == Decimal("750.00")


async def test_history_filters(ledger, funded_seller):
    seller_id = funded_seller.id
    await ledger.record_earned_commission(seller_id, "ORD-2", "20")
    await ledger.record_reversal(seller_id, "ORD-1000", "5")

    pending = await ledger.list_commissions(seller_id, status=CommissionStatus.PENDING)
    reversals = await ledger.list_commissions(seller_id, type="REVERSED")

    assert [e.order_id for e in pending] == ["ORD-2"]
    assert [e.amount for e in reversals] == [Decimal("5.00")]


async def test_commission_summary(ledger, funded_seller):
    seller_id = funded_seller.id
    await ledger.record_earned_commission(seller_id, "ORD-2", "20")
    await ledger.record_earned_commission(seller_id, "ORD-3", "30", confirmed=True)
    await ledger.void_order_commission("ORD-3")
    await ledger.record_reversal(seller_id, "ORD-1000", "100")
    await ledger.request_withdrawal(seller_id, "400")

    summary = await ledger.get_commission_summary(seller_id)

    assert summary["pending_amount"] == Decimal("20.00")
    assert summary["confirmed_amount"] == Decimal("1000.00")
    assert summary["voided_amount"] == Decimal("30.00")
    assert summary["reversed_amount"] == Decimal("100.00")
    assert summary["counts"] == {"pending": 1, "confirmed": 1, "voided": 1, "reversed": 1}
    assert summary["pending_withdrawals"] == Decimal("400.00")
    assert summary["total_withdrawn"] == Decimal("0.00")
    assert summary["available_balance"] == Decimal("500.00")


async def test_unknown_seller(ledger):
    import uuid

    with pytest.raises(NotFound):
        await ledger.get_seller(uuid.uuid4())
    with pytest.raises(NotFound):
        await ledger.record_earned_commission(uuid.uuid4(), "ORD-1", "10")


async def test_seller_collections_never_load_implicitly(ledger, funded_seller):
    from sqlalchemy.exc import InvalidRequestError

    seller = await ledger.get_seller(funded_seller.id)

    with pytest.raises(InvalidRequestError):
        seller.commission_events
    with pytest.raises(InvalidRequestError):
        seller.withdrawal_requests
