from decimal import Decimal

import pytest

from ledger.core.exceptions import InvalidAmount
from ledger.core.money import parse_amount
from ledger.services.balance_calculator import calculate_balance, load_balance


def test_balance_subtracts_reversals_and_withdrawals():
    breakdown = calculate_balance(
        confirmed_earned=Decimal("1000.00"),
        confirmed_reversed=Decimal("100.00"),
        completed_withdrawals=Decimal("300.00"),
        pending_withdrawals=Decimal("200.00"),
    )

    assert breakdown.raw_balance == Decimal("400.00")
    assert breakdown.available_balance == Decimal("400.00")
    assert breakdown.net_confirmed_commission == Decimal("900.00")
    assert not breakdown.floor_engaged


def test_negative_raw_balance_is_floored_and_flagged():
    breakdown = calculate_balance(
        confirmed_earned=Decimal("100.00"),
        confirmed_reversed=Decimal("150.00"),
    )

    assert breakdown.raw_balance == Decimal("-50.00")
    assert breakdown.available_balance == Decimal("0.00")
    assert breakdown.floor_engaged
    assert breakdown.as_dict()["floor_engaged"] is True


def test_exactly_zero_is_not_an_anomaly():
    breakdown = calculate_balance(Decimal("50.00"), pending_withdrawals=Decimal("50.00"))

    assert breakdown.available_balance == Decimal("0.00")
    assert not breakdown.floor_engaged


@pytest.mark.parametrize("value, expected", [
    ("10", Decimal("10.00")),
    (0.1, Decimal("0.10")),
    (Decimal("2.345"), Decimal("2.35")),
    (7, Decimal("7.00")),
])
def test_parse_amount_accepts_positive_values(value, expected):
    assert parse_amount(value) == expected


@pytest.mark.parametrize("value", [0, -1, "0.001", "abc", None, True, "NaN", "Infinity", "1e30"])
def test_parse_amount_rejects_invalid_values(value):
    with pytest.raises(InvalidAmount):
        parse_amount(value)


async def test_load_balance_ignores_pending_and_voided_commission(ledger, seller):
    await ledger.record_earned_commission(seller.id, "ORD-1", "500.00", confirmed=True)
    await ledger.record_earned_commission(seller.id, "ORD-2", "200.00")
    await ledger.record_earned_commission(seller.id, "ORD-3", "300.00", confirmed=True)
    await ledger.void_order_commission("ORD-3", reason="cancelled")

    breakdown = await load_balance(ledger.db, seller.id)

    assert breakdown.confirmed_earned == Decimal("500.00")
    assert breakdown.available_balance == Decimal("500.00")


async def test_balance_of_new_seller_is_zero(ledger, seller):
    assert await ledger.get_available_balance(seller.id) == Decimal("0.00")


@pytest.mark.parametrize("value", [
    "1000000000000",
    "12345678901234567.89",
    "999999999999.995",
])
def test_parse_amount_rejects_values_too_large_for_money_column(value):
    with pytest.raises(InvalidAmount) as exc_info:
        parse_amount(value)

    assert exc_info.value.details["max_integer_digits"] == 12


def test_parse_amount_accepts_largest_money_value():
    assert parse_amount("999999999999.99") == Decimal("999999999999.99")


async def test_oversized_commission_is_rejected_before_persistence(ledger, seller):
    seller_id = seller.id

    with pytest.raises(InvalidAmount):
        await ledger.record_earned_commission(seller_id, "BIG", "1e30", confirmed=True)
    with pytest.raises(InvalidAmount):
        await ledger.record_earned_commission(seller_id, "BIG", "12345678901234567.89", confirmed=True)

    assert await ledger.list_commissions(seller_id) == []
    assert await ledger.get_available_balance(seller_id) == Decimal("0.00")
