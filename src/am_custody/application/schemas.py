"""Pydantic schemas for the custody API."""

from pydantic import BaseModel, Field

from src.am_common.units import format_units


class TokenApproveRequest(BaseModel):
    token: str
    amount: int = Field(..., ge=0)
    spender: str | None = Field(None, description="Defaults to the market vault")


class CreditWalletRequest(BaseModel):
    owner: str
    currency: str | None = None  # empty = native currency
    amount: int = Field(..., gt=0)


class HoldingsResponse(BaseModel):
    owner: str
    currency: str
    amount: str
    amount_display: str

    @classmethod
    def of(cls, owner: str, currency: str, amount: int) -> "HoldingsResponse":
        return cls(
            owner=owner, currency=currency, amount=str(amount), amount_display=format_units(amount)
        )


class AllowanceResponse(BaseModel):
    token: str
    owner: str
    spender: str
    amount: str
