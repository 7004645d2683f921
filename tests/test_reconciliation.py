"""Cached balance reconciliation."""
import logging
import uuid
from decimal import Decimal

import pytest

from ledger.core.exceptions import NotFound
from ledger.jobs.reconciliation_jobs import reconcile_all_sellers
from ledger.models.withdrawal import WithdrawalStatus
from ledger.services.audit_service import AuditService


async def _corrupt_cache(ledger, seller_id, value):
    seller = await ledger.get_seller(seller_id)
    seller.available_commission = Decimal(value)
    await ledger.db.commit()


async def test_drift_is_corrected_and_audited(ledger, funded_seller, caplog):
    seller_id = funded_seller.id
    await _corrupt_cache(ledger, seller_id, "5.00")

    with caplog.at_level(logging.WARNING):
        report = await ledger.reconcile(seller_id)

    result = report.results[0]
    assert result.corrected
    assert result.cached_before == Decimal("5.00")
    assert result.computed == Decimal("1000.00")
    assert "drift" in caplog.text

    seller = await ledger.get_seller(seller_id)
    assert seller.available_commission == Decimal("1000.00")
    assert seller.balance_reconciled_at is not None

    history = await AuditService(ledger.db).get_entity_history("SELLER", seller_id)
    assert [entry.action for entry in history] == ["BALANCE_CORRECTED"]
    assert history[0].performed_by == "reconciliation"
    assert history[0].old_values == {"available_commission": "5.00"}


async def test_reconcile_converges_after_mutations(ledger, funded_seller):
    seller_id = funded_seller.id
    first = await ledger.request_withdrawal(seller_id, "200")
    second = await ledger.request_withdrawal(seller_id, "100")
    await ledger.resolve_withdrawal(first.id, WithdrawalStatus.COMPLETED)
    await ledger.resolve_withdrawal(second.id, WithdrawalStatus.REJECTED)
    await ledger.record_earned_commission(seller_id, "ORD-2", "50", confirmed=True)
    await ledger.record_reversal(seller_id, "ORD-1000", "25")

    report = await ledger.reconcile(seller_id)

    seller = await ledger.get_seller(seller_id)
    assert seller.available_commission == await ledger.get_available_balance(seller_id)
    assert seller.available_commission == Decimal("825.00")
    # Every mutation already refreshed the cache
    assert not report.results[0].corrected

    again = await ledger.reconcile(seller_id)
    assert again.corrected == 0


async def test_negative_raw_balance_is_reported_not_raised(ledger, seller, caplog):
    seller_id = seller.id
    await ledger.record_earned_commission(seller_id, "ORD-1", "100", confirmed=True)
    await ledger.record_reversal(seller_id, "ORD-1", "150")

    with caplog.at_level(logging.WARNING):
        report = await ledger.reconcile(seller_id)

    assert report.anomalies == 1
    assert report.results[0].floor_engaged
    assert report.results[0].raw_balance == Decimal("-50.00")
    assert report.results[0].computed == Decimal("0.00")
    assert "anomaly" in caplog.text
    assert await ledger.get_available_balance(seller_id) == Decimal("0.00")


async def test_reconcile_all_sellers(ledger, funded_seller):
    other = await ledger.register_seller("Second Seller")
    other_id = other.id
    await _corrupt_cache(ledger, other_id, "42.00")

    report = await ledger.reconcile()

    assert report.checked == 2
    assert report.corrected == 1
    assert report.errors == []
    assert report.finished_at is not None
    assert report.as_dict()["corrected"] == 1


async def test_reconcile_unknown_seller(ledger):
    with pytest.raises(NotFound):
        await ledger.reconcile(uuid.uuid4())


async def test_reconciliation_job_uses_its_own_session(ledger, funded_seller, session_factory):
    seller_id = funded_seller.id
    await _corrupt_cache(ledger, seller_id, "1.00")

    result = await reconcile_all_sellers(session_factory)

    assert result["checked"] == 1
    assert result["corrected"] == 1
    assert result["results"][0]["computed"] == "1000.00"
    assert await ledger.get_available_balance(seller_id) == Decimal("1000.00")
