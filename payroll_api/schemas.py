"""Request and response bodies for the HTTP API."""

from decimal import Decimal

from pydantic import BaseModel


class AmountRequest(BaseModel):
    """Body of ``POST /topup`` and ``POST /deduct``."""

    amount: Decimal


class ApiResponse(BaseModel):
    """Envelope returned by every endpoint, success or failure."""

    success: bool
    message: str


class BalanceResponse(ApiResponse):
    balance: str
