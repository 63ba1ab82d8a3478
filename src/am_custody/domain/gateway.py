"""Value gateway Protocol — native and token movements against wallets.

The market vault is the wallet at the market address. Every method takes the
caller's session so value moves commit or roll back with the ledger.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class ValueGatewayProtocol(Protocol):
    @property
    def vault(self) -> str: ...

    async def receive_native(self, db: AsyncSession, sender: str, amount: int) -> None:
        """Pull attached native value from `sender` into the vault."""
        ...

    async def send_native(self, db: AsyncSession, to: str, amount: int) -> None:
        """Push native value from the vault to `to`."""
        ...

    async def token_transfer_from(
        self, db: AsyncSession, token: str, owner: str, to: str, amount: int
    ) -> None:
        """Move `amount` of `token` from `owner` to `to` using the vault's allowance."""
        ...

    async def token_transfer(self, db: AsyncSession, token: str, to: str, amount: int) -> None:
        """Move `amount` of `token` from the vault to `to`."""
        ...

    async def holdings(self, db: AsyncSession, owner: str, currency: str) -> int: ...

    async def allowance(self, db: AsyncSession, token: str, owner: str, spender: str) -> int: ...

    async def approve(
        self, db: AsyncSession, token: str, owner: str, spender: str, amount: int
    ) -> None: ...

    async def credit_wallet(
        self, db: AsyncSession, owner: str, currency: str, amount: int
    ) -> int: ...
