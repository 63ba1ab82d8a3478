"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    PAUSER = "PAUSER"
    OPERATOR = "OPERATOR"
    DISCOUNTED_MINTER = "DISCOUNTED_MINTER"
    MINTER = "MINTER"


class Operation(str, Enum):
    """Every mutating entry point, used by the policy table and the pause set."""
    FULFILL = "fulfill"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    MINT = "mint"
    WITHDRAW_FEES = "withdraw_fees"
    WITHDRAW_PARTNER_FEES = "withdraw_partner_fees"
    SET_FEE_RATE = "set_fee_rate"
    SET_MINT_FEES = "set_mint_fees"
    SET_ASSET_REGISTRY = "set_asset_registry"
    SET_PARTNER_FEE_RATE = "set_partner_fee_rate"
    UPDATE_WHITELIST = "update_whitelist"
    MANAGE_ROLES = "manage_roles"
    TRANSFER_ADMIN = "transfer_admin"
    PAUSE = "pause"
    CREDIT_WALLET = "credit_wallet"
    MINT_WITH_ROLE = "mint_with_role"
    SET_CREATOR = "set_creator"


class NonceScope(str, Enum):
    """Disjoint replay scopes: an order nonce never collides with an offer nonce."""
    ORDER = "ORDER"
    OFFER = "OFFER"


class SignatureScheme(str, Enum):
    TYPED_DATA = "TYPED_DATA"
    LEGACY_PACKED = "LEGACY_PACKED"


class FundingMode(str, Enum):
    """How a priced native-currency settlement is funded."""
    BALANCE_ONLY = "BALANCE_ONLY"
    ATTACHED_VALUE = "ATTACHED_VALUE"


class EventType(str, Enum):
    MARKET_INITIALIZED = "MARKET_INITIALIZED"
    ADMIN_CHANGED = "ADMIN_CHANGED"
    ROLE_GRANTED = "ROLE_GRANTED"
    ROLE_REVOKED = "ROLE_REVOKED"
    FEE_RATE_UPDATED = "FEE_RATE_UPDATED"
    MINT_FEES_UPDATED = "MINT_FEES_UPDATED"
    ASSET_REGISTRY_UPDATED = "ASSET_REGISTRY_UPDATED"
    PARTNER_FEE_RATE_UPDATED = "PARTNER_FEE_RATE_UPDATED"
    CONTRACT_WHITELISTED = "CONTRACT_WHITELISTED"
    CONTRACT_UNWHITELISTED = "CONTRACT_UNWHITELISTED"
    PAUSED = "PAUSED"
    UNPAUSED = "UNPAUSED"
    DEPOSITED = "DEPOSITED"
    WITHDRAWN = "WITHDRAWN"
    ORDER_FULFILLED = "ORDER_FULFILLED"
    FEES_WITHDRAWN = "FEES_WITHDRAWN"
    PARTNER_FEES_WITHDRAWN = "PARTNER_FEES_WITHDRAWN"
    MINTED = "MINTED"
    CREATOR_SET = "CREATOR_SET"
    ASSET_TRANSFERRED = "ASSET_TRANSFERRED"
    WALLET_CREDITED = "WALLET_CREDITED"
