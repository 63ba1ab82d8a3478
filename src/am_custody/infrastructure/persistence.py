"""SqlValueGateway — concrete implementation of ValueGatewayProtocol.

Wallet balances live in `wallets(owner, currency, balance)`; token allowances in
`token_allowances(token, owner, spender, amount)`. Debits are guarded
`UPDATE ... WHERE balance >= :amount RETURNING` statements: 0 rows means the
source could not cover the transfer.

Transaction ownership: The CALLER (application service or engine) is responsible
for the transaction / savepoint.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_common.address import NATIVE_CURRENCY, to_address
from src.am_common.errors import InsufficientAllowanceError, ValueTransferFailedError

logger = logging.getLogger(__name__)

_GET_WALLET_SQL = text("""
    SELECT balance FROM wallets WHERE owner = :owner AND currency = :currency
""")

_CREDIT_WALLET_SQL = text("""
    INSERT INTO wallets (owner, currency, balance)
    VALUES (:owner, :currency, :amount)
    ON CONFLICT (owner, currency) DO UPDATE
        SET balance = wallets.balance + EXCLUDED.balance,
            updated_at = NOW()
    RETURNING balance
""")

_DEBIT_WALLET_SQL = text("""
    UPDATE wallets
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE owner = :owner AND currency = :currency AND balance >= :amount
    RETURNING balance
""")

_GET_ALLOWANCE_SQL = text("""
    SELECT amount FROM token_allowances
    WHERE token = :token AND owner = :owner AND spender = :spender
""")

_SET_ALLOWANCE_SQL = text("""
    INSERT INTO token_allowances (token, owner, spender, amount)
    VALUES (:token, :owner, :spender, :amount)
    ON CONFLICT (token, owner, spender) DO UPDATE
        SET amount = EXCLUDED.amount,
            updated_at = NOW()
""")

_SPEND_ALLOWANCE_SQL = text("""
    UPDATE token_allowances
    SET amount = amount - :amount,
        updated_at = NOW()
    WHERE token = :token AND owner = :owner AND spender = :spender AND amount >= :amount
    RETURNING amount
""")


class SqlValueGateway:
    """Wallet-table custody. The vault is the wallet owned by the market address."""

    def __init__(self, vault: str) -> None:
        self._vault = vault

    @property
    def vault(self) -> str:
        return self._vault

    async def _move(
        self, db: AsyncSession, currency: str, source: str, to: str, amount: int
    ) -> None:
        if amount == 0:
            return
        result = await db.execute(
            _DEBIT_WALLET_SQL, {"owner": source, "currency": currency, "amount": amount}
        )
        if result.fetchone() is None:
            available = await self.holdings(db, source, currency)
            raise ValueTransferFailedError(
                f"{source} holds {available} of {currency}, cannot send {amount}"
            )
        await self.credit_wallet(db, to, currency, amount)
        logger.debug("Moved %d of %s from %s to %s", amount, currency, source, to)

    async def receive_native(self, db: AsyncSession, sender: str, amount: int) -> None:
        await self._move(db, NATIVE_CURRENCY, sender, self._vault, amount)

    async def send_native(self, db: AsyncSession, to: str, amount: int) -> None:
        await self._move(db, NATIVE_CURRENCY, self._vault, to, amount)

    async def token_transfer_from(
        self, db: AsyncSession, token: str, owner: str, to: str, amount: int
    ) -> None:
        if amount == 0:
            return
        params = {"token": token, "owner": owner, "spender": self._vault, "amount": amount}
        if (await db.execute(_SPEND_ALLOWANCE_SQL, params)).fetchone() is None:
            allowance = await self.allowance(db, token, owner, self._vault)
            raise InsufficientAllowanceError(token, amount, allowance)
        await self._move(db, token, owner, to, amount)

    async def token_transfer(self, db: AsyncSession, token: str, to: str, amount: int) -> None:
        await self._move(db, token, self._vault, to, amount)

    async def holdings(self, db: AsyncSession, owner: str, currency: str) -> int:
        value = (
            await db.execute(_GET_WALLET_SQL, {"owner": owner, "currency": currency})
        ).scalar_one_or_none()
        return int(value) if value is not None else 0

    async def allowance(self, db: AsyncSession, token: str, owner: str, spender: str) -> int:
        value = (
            await db.execute(
                _GET_ALLOWANCE_SQL, {"token": token, "owner": owner, "spender": spender}
            )
        ).scalar_one_or_none()
        return int(value) if value is not None else 0

    async def approve(
        self, db: AsyncSession, token: str, owner: str, spender: str, amount: int
    ) -> None:
        await db.execute(
            _SET_ALLOWANCE_SQL,
            {"token": token, "owner": owner, "spender": spender, "amount": amount},
        )

    async def credit_wallet(
        self, db: AsyncSession, owner: str, currency: str, amount: int
    ) -> int:
        value = (
            await db.execute(
                _CREDIT_WALLET_SQL, {"owner": owner, "currency": currency, "amount": amount}
            )
        ).scalar_one()
        return int(value)


def default_value_gateway() -> SqlValueGateway:
    """Gateway whose vault is the configured market address."""
    return SqlValueGateway(to_address(settings.MARKET_ADDRESS, "MARKET_ADDRESS"))
