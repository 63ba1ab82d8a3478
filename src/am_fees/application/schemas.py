"""Pydantic schemas for the fee API."""

from pydantic import BaseModel

from src.am_common.units import format_units


class WithdrawFeesRequest(BaseModel):
    currency: str | None = None  # empty = native currency


class FeeBalanceResponse(BaseModel):
    currency: str
    amount: str
    amount_display: str

    @classmethod
    def of(cls, currency: str, amount: int) -> "FeeBalanceResponse":
        return cls(currency=currency, amount=str(amount), amount_display=format_units(amount))


class PartnerFeeBalanceResponse(FeeBalanceResponse):
    partner: str

    @classmethod
    def for_partner(
        cls, partner: str, currency: str, amount: int
    ) -> "PartnerFeeBalanceResponse":
        return cls(
            partner=partner,
            currency=currency,
            amount=str(amount),
            amount_display=format_units(amount),
        )


class PartnerFeeRateResponse(BaseModel):
    partner: str
    rate: int


class FeeWithdrawalResponse(BaseModel):
    to: str
    currency: str
    withdrawn: str
