from fastapi import APIRouter

from ledger.api.v1.endpoints import (
    sellers,
    commissions,
    orders,
    withdrawals,
    reconciliation,
)

api_router = APIRouter(prefix="/api/v1")

# ==================== Sellers ====================
api_router.include_router(
    sellers.router,
    prefix="/sellers",
    tags=["Sellers"]
)

# ==================== Commissions ====================
api_router.include_router(
    commissions.router,
    prefix="/commissions",
    tags=["Commissions"]
)

# ==================== Orders ====================
api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"]
)

# ==================== Withdrawals ====================
api_router.include_router(
    withdrawals.seller_router,
    prefix="/sellers",
    tags=["Withdrawals"]
)
api_router.include_router(
    withdrawals.router,
    prefix="/withdrawals",
    tags=["Withdrawals"]
)

# ==================== Reconciliation ====================
api_router.include_router(
    reconciliation.router,
    prefix="/reconciliation",
    tags=["Reconciliation"]
)
