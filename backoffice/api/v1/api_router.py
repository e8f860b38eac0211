"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter

from backoffice.api.v1 import stock, transactions

api_router = APIRouter()

# Stock Control routes
api_router.include_router(stock.router, prefix="/stock", tags=["stock"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
