"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from groupledger.app.api.v1.endpoints import users, groups, expenses, settlements, balances

router = APIRouter()

router.include_router(users.router)
router.include_router(groups.router)
router.include_router(expenses.router)
router.include_router(settlements.router)
router.include_router(balances.router)
