"""Fee split — platform fee, partner share, seller proceeds.

    total_fee     = price * fee_rate // 10000
    partner_fee   = total_fee * partner_rate // 10000
    platform_fee  = total_fee - partner_fee
    seller_amount = price - total_fee

Both divisions floor. The partner share is computed from total_fee and the
platform takes the remainder, so rounding dust always lands with the platform.
"""

from src.am_common.units import bps_of
from src.am_ledger.domain.models import MAX_FEE_RATE, MAX_PARTNER_FEE_RATE
from src.am_settlement.domain.models import FeeSplit


def split_fee(price: int, fee_rate: int, partner_rate: int = 0) -> FeeSplit:
    if price < 0:
        raise ValueError(f"price must be >= 0, got {price}")
    if not 0 <= fee_rate <= MAX_FEE_RATE:
        raise ValueError(f"fee_rate out of range: {fee_rate}")
    if not 0 <= partner_rate <= MAX_PARTNER_FEE_RATE:
        raise ValueError(f"partner_rate out of range: {partner_rate}")

    total_fee = bps_of(price, fee_rate)
    partner_fee = bps_of(total_fee, partner_rate) if partner_rate else 0
    return FeeSplit(
        total_fee=total_fee,
        platform_fee=total_fee - partner_fee,
        partner_fee=partner_fee,
        seller_amount=price - total_fee,
    )

