# earnings_ledger/api/v1/api.py

from fastapi import APIRouter
from earnings_ledger.api.v1.endpoints import earnings

api_router = APIRouter()

api_router.include_router(earnings.router)
