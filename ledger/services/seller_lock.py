"""
Per-seller critical section.

Two layers serialize balance-changing work for one seller:
- an asyncio.Lock per seller id, shared by every session in this process
- SELECT ... FOR UPDATE on the seller row, for other worker processes
  (PostgreSQL; SQLite ignores FOR UPDATE and relies on the first layer)

A seller's lock lives only while some task holds or waits for it.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.exceptions import NotFound
from ledger.models.seller import Seller

_seller_locks: Dict[uuid.UUID, asyncio.Lock] = {}
_lock_users: Dict[uuid.UUID, int] = {}


def _checkout_lock(seller_id: uuid.UUID) -> asyncio.Lock:
    lock = _seller_locks.setdefault(seller_id, asyncio.Lock())
    _lock_users[seller_id] = _lock_users.get(seller_id, 0) + 1
    return lock


def _release_lock(seller_id: uuid.UUID) -> None:
    remaining = _lock_users.get(seller_id, 1) - 1
    if remaining > 0:
        _lock_users[seller_id] = remaining
    else:
        _lock_users.pop(seller_id, None)
        _seller_locks.pop(seller_id, None)


def active_seller_locks() -> int:
    """Number of sellers with a lock currently held or awaited."""
    return len(_seller_locks)


def reset_seller_locks() -> None:
    """Drop all process-local locks (new event loop, tests)."""
    _seller_locks.clear()
    _lock_users.clear()


@asynccontextmanager
async def seller_critical_section(db: AsyncSession, seller_id: uuid.UUID) -> AsyncIterator[Seller]:
    """
    Enter the seller's critical section and yield the row-locked seller.

    The caller must commit (or roll back) before the block exits so the
    next waiter reads committed state.
    """
    lock = _checkout_lock(seller_id)
    try:
        async with lock:
            result = await db.execute(
                select(Seller)
                .where(Seller.id == seller_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            seller = result.scalar_one_or_none()
            if seller is None:
                raise NotFound(f"Seller {seller_id} not found", {"seller_id": str(seller_id)})
            try:
                yield seller
            except BaseException:
                await db.rollback()
                raise
    finally:
        _release_lock(seller_id)
