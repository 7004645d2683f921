"""Cash on delivery revenue confirmation."""
import uuid
from decimal import Decimal

import pytest

from ledger.core.exceptions import AlreadyConfirmed, InvalidAmount, InvalidTransition, NotFound
from ledger.models.commission import CommissionStatus
from ledger.services.audit_service import AuditService


async def test_pending_commission_does_not_count_until_confirmed(ledger, seller):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "COD-1", "400")
    assert await ledger.get_available_balance(seller_id) == Decimal("0.00")

    event = await ledger.confirm_revenue("COD-1", "400", confirmed_by="ops")

    assert event.status == CommissionStatus.CONFIRMED.value
    assert event.confirmed_by == "ops"
    assert await ledger.get_available_balance(seller_id) == Decimal("400.00")


async def test_second_confirmation_raises_and_counts_once(ledger, seller):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "COD-1", "400")
    await ledger.confirm_revenue("COD-1", "400")

    with pytest.raises(AlreadyConfirmed):
        await ledger.confirm_revenue("COD-1", "400")

    assert await ledger.get_available_balance(seller_id) == Decimal("400.00")


async def test_already_confirmed_is_an_invalid_transition():
    assert issubclass(AlreadyConfirmed, InvalidTransition)


async def test_partial_collection_confirms_lower_amount(ledger, seller):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "COD-1", "400")

    event = await ledger.confirm_revenue("COD-1", "350.00")

    assert event.amount == Decimal("350.00")
    assert event.original_amount == Decimal("400.00")
    assert await ledger.get_available_balance(seller_id) == Decimal("350.00")


async def test_confirmation_without_event_creates_one_for_seller(ledger, seller):
    seller_id = seller.id

    event = await ledger.confirm_revenue("COD-9", "75", seller_id=seller_id)

    assert event.status == CommissionStatus.CONFIRMED.value
    assert event.seller_id == seller_id
    assert await ledger.get_available_balance(seller_id) == Decimal("75.00")


async def test_unknown_order_without_seller_raises_not_found(ledger):
    with pytest.raises(NotFound):
        await ledger.confirm_revenue("MISSING", "10")


async def test_voided_order_cannot_be_confirmed(ledger, seller):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "COD-1", "400")
    await ledger.void_order_commission("COD-1", reason="customer refused delivery")

    with pytest.raises(InvalidTransition) as exc_info:
        await ledger.confirm_revenue("COD-1", "400")

    assert not isinstance(exc_info.value, AlreadyConfirmed)
    assert await ledger.get_available_balance(seller_id) == Decimal("0.00")


async def test_invalid_confirmed_amount(ledger, seller):
    await ledger.record_earned_commission(seller.id, "COD-1", "400")

    with pytest.raises(InvalidAmount):
        await ledger.confirm_revenue("COD-1", "0")


async def test_confirmation_is_audited(ledger, seller):
    await ledger.record_earned_commission(seller.id, "COD-1", "400")
    event = await ledger.confirm_revenue("COD-1", "380", confirmed_by="ops")

    history = await AuditService(ledger.db).get_entity_history("COMMISSION", event.id)

    assert len(history) == 1
    assert history[0].action == "COMMISSION_CONFIRMED"
    assert history[0].old_values == {"status": "PENDING", "amount": "400.00"}
    assert history[0].new_values == {"status": "CONFIRMED", "amount": "380.00"}


async def test_unknown_seller_for_new_confirmation(ledger):
    with pytest.raises(NotFound):
        await ledger.confirm_revenue("COD-1", "10", seller_id=uuid.uuid4())


async def test_confirmation_for_another_sellers_order_is_refused(ledger, seller):
    seller_id = seller.id
    other = await ledger.register_seller("Other Seller")
    other_id = other.id
    await ledger.record_earned_commission(seller_id, "COD-1", "400")

    with pytest.raises(InvalidTransition) as exc_info:
        await ledger.confirm_revenue("COD-1", "400", seller_id=other_id)

    assert exc_info.value.details["order_seller_id"] == str(seller_id)
    assert await ledger.get_available_balance(seller_id) == Decimal("0.00")
    assert await ledger.get_available_balance(other_id) == Decimal("0.00")

    event = await ledger.confirm_revenue("COD-1", "400", seller_id=seller_id)
    assert event.seller_id == seller_id
