"""Pydantic schemas for deposited balances."""

from pydantic import BaseModel, Field

from src.am_common.units import format_units


class DepositRequest(BaseModel):
    value: int = Field(..., gt=0, description="Native value attached to the deposit, in wei")
    account: str | None = Field(None, description="Beneficiary; defaults to the caller")


class WithdrawRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Amount to withdraw, in wei")
    account: str | None = Field(None, description="Account to withdraw from; ADMIN only if not the caller")


class BalanceResponse(BaseModel):
    account: str
    balance: str
    balance_display: str

    @classmethod
    def of(cls, account: str, balance: int) -> "BalanceResponse":
        return cls(account=account, balance=str(balance), balance_display=format_units(balance))


class DepositResponse(BalanceResponse):
    deposited: str


class WithdrawResponse(BalanceResponse):
    withdrawn: str
