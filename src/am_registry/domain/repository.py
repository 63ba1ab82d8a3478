"""Repository Protocol — dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_registry.domain.models import Asset, IntelligentData


class AssetRepositoryProtocol(Protocol):
    async def get_asset(self, db: AsyncSession, contract: str, token_id: int) -> Asset | None: ...

    async def next_token_id(self, db: AsyncSession, contract: str) -> int: ...

    async def insert_asset(self, db: AsyncSession, asset: Asset) -> Asset: ...

    async def update_owner(
        self, db: AsyncSession, contract: str, token_id: int, owner: str
    ) -> None:
        """Set the new owner and clear any single-token approval."""
        ...

    async def set_approved(
        self, db: AsyncSession, contract: str, token_id: int, operator: str
    ) -> None: ...

    async def set_creator(
        self, db: AsyncSession, contract: str, token_id: int, creator: str
    ) -> None: ...

    async def replace_data(
        self, db: AsyncSession, contract: str, token_id: int, data: list[IntelligentData]
    ) -> None: ...

    async def mark_proof_used(self, db: AsyncSession, nonce: str) -> bool:
        """Insert the proof nonce. False if it was already present."""
        ...
