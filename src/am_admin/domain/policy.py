"""Access policy: which role each entry point requires.

`None` means the operation is open to any authenticated caller; the operation
itself may still apply an ownership rule (withdraw, partner-fee withdrawal).
"""

from src.am_common.enums import Operation, Role

OPERATION_ROLES: dict[Operation, Role | None] = {
    Operation.FULFILL: None,
    Operation.DEPOSIT: None,
    Operation.WITHDRAW: None,
    Operation.MINT: None,
    Operation.WITHDRAW_FEES: Role.ADMIN,
    Operation.WITHDRAW_PARTNER_FEES: None,
    Operation.SET_FEE_RATE: Role.ADMIN,
    Operation.SET_MINT_FEES: Role.ADMIN,
    Operation.SET_ASSET_REGISTRY: Role.ADMIN,
    Operation.SET_PARTNER_FEE_RATE: Role.ADMIN,
    Operation.UPDATE_WHITELIST: Role.ADMIN,
    Operation.MANAGE_ROLES: Role.ADMIN,
    Operation.TRANSFER_ADMIN: Role.ADMIN,
    Operation.PAUSE: Role.PAUSER,
    Operation.CREDIT_WALLET: Role.OPERATOR,
    Operation.MINT_WITH_ROLE: Role.MINTER,
    Operation.SET_CREATOR: Role.OPERATOR,
}

# Moved together on admin transfer
ADMIN_ROLE_BUNDLE: tuple[Role, ...] = (Role.ADMIN, Role.PAUSER, Role.OPERATOR)
