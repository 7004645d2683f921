from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config import settings
from ledger.database import get_db
from ledger.services.ledger_service import LedgerService
from ledger.services.notification_service import NotificationDispatcher

_fallback_dispatcher = NotificationDispatcher()


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Notification dispatcher attached to the application, if any."""
    return getattr(request.app.state, "dispatcher", None) or _fallback_dispatcher


DB = Annotated[AsyncSession, Depends(get_db)]
Dispatcher = Annotated[NotificationDispatcher, Depends(get_dispatcher)]


async def get_ledger_service(db: DB, dispatcher: Dispatcher) -> LedgerService:
    """
    Build the ledger facade for one request.

    Thresholds are read from settings here and passed in explicitly;
    the services never read global settings themselves.
    """
    return LedgerService(
        db,
        dispatcher=dispatcher,
        min_withdrawal_amount=settings.MIN_WITHDRAWAL_AMOUNT,
    )


Ledger = Annotated[LedgerService, Depends(get_ledger_service)]
