"""Asset registry — ownership, creator attribution and proof-gated transfers.

One AssetRegistry serves every asset contract the market knows about: rows are
keyed by (contract, token_id), so the platform registry and whitelisted
external contracts share the same storage.

The settlement engine consumes it through AssetRegistryProtocol only.
"""

import logging
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.address import ZERO_ADDRESS
from src.am_common.enums import EventType
from src.am_common.errors import (
    AssetNotFoundError,
    AssetTransferFailedError,
    InvalidAddressError,
    NotApprovedError,
    NotAssetOwnerError,
    ProofAlreadyUsedError,
    ProofVerificationFailedError,
)
from src.am_registry.domain.models import Asset, IntelligentData, TransferProof
from src.am_registry.domain.proofs import OracleProofVerifier
from src.am_registry.domain.repository import AssetRepositoryProtocol

logger = logging.getLogger(__name__)


class EventSinkProtocol(Protocol):
    async def record_event(
        self, db: AsyncSession, event_type: str, payload: dict[str, Any]
    ) -> object: ...


class AssetRegistryProtocol(Protocol):
    async def owner_of(self, db: AsyncSession, contract: str, token_id: int) -> str: ...

    async def creator_of(self, db: AsyncSession, contract: str, token_id: int) -> str: ...

    async def transfer_from(
        self,
        db: AsyncSession,
        contract: str,
        operator: str,
        from_: str,
        to: str,
        token_id: int,
    ) -> None: ...

    async def i_transfer_from(
        self,
        db: AsyncSession,
        contract: str,
        operator: str,
        from_: str,
        to: str,
        token_id: int,
        proofs: list[TransferProof],
    ) -> None: ...


class AssetRegistry:
    def __init__(
        self,
        repo: AssetRepositoryProtocol,
        verifier: OracleProofVerifier,
        events: EventSinkProtocol,
    ) -> None:
        self._repo = repo
        self._verifier = verifier
        self._events = events

    async def get_asset(self, db: AsyncSession, contract: str, token_id: int) -> Asset:
        asset = await self._repo.get_asset(db, contract, token_id)
        if asset is None:
            raise AssetNotFoundError(contract, token_id)
        return asset

    async def owner_of(self, db: AsyncSession, contract: str, token_id: int) -> str:
        return (await self.get_asset(db, contract, token_id)).owner

    async def creator_of(self, db: AsyncSession, contract: str, token_id: int) -> str:
        return (await self.get_asset(db, contract, token_id)).creator

    async def approve(
        self, db: AsyncSession, contract: str, owner: str, operator: str, token_id: int
    ) -> None:
        asset = await self.get_asset(db, contract, token_id)
        if asset.owner != owner:
            raise NotAssetOwnerError(owner, token_id)
        await self._repo.set_approved(db, contract, token_id, operator)

    async def set_creator(
        self, db: AsyncSession, contract: str, token_id: int, creator: str
    ) -> None:
        await self.get_asset(db, contract, token_id)
        await self._repo.set_creator(db, contract, token_id, creator)
        await self._events.record_event(
            db,
            EventType.CREATOR_SET.value,
            {"contract": contract, "token_id": token_id, "creator": creator},
        )

    async def mint_with_role(
        self,
        db: AsyncSession,
        contract: str,
        to: str,
        uri: str = "",
        creator: str = ZERO_ADDRESS,
        data: list[IntelligentData] | None = None,
        fee: int = 0,
    ) -> Asset:
        """Mint a new token to `to`. Role checks happen at the calling service."""
        if to == ZERO_ADDRESS:
            raise InvalidAddressError("to", to)
        token_id = await self._repo.next_token_id(db, contract)
        asset = await self._repo.insert_asset(
            db,
            Asset(
                contract=contract,
                token_id=token_id,
                owner=to,
                creator=creator,
                uri=uri,
                data=list(data or []),
            ),
        )
        await self._events.record_event(
            db,
            EventType.MINTED.value,
            {
                "contract": contract,
                "token_id": token_id,
                "owner": to,
                "creator": creator,
                "data_count": len(asset.data),
                "fee": str(fee),
            },
        )
        if creator != ZERO_ADDRESS:
            await self._events.record_event(
                db,
                EventType.CREATOR_SET.value,
                {"contract": contract, "token_id": token_id, "creator": creator},
            )
        logger.info("Minted %s#%d to %s (creator=%s)", contract, token_id, to, creator)
        return asset

    async def transfer_from(
        self,
        db: AsyncSession,
        contract: str,
        operator: str,
        from_: str,
        to: str,
        token_id: int,
    ) -> None:
        asset = await self._check_transfer(db, contract, operator, from_, to, token_id)
        await self._move(db, asset, to, proof_nonces=[])

    async def i_transfer_from(
        self,
        db: AsyncSession,
        contract: str,
        operator: str,
        from_: str,
        to: str,
        token_id: int,
        proofs: list[TransferProof],
    ) -> None:
        """Transfer that re-keys every data payload; one valid, unused proof per payload."""
        asset = await self._check_transfer(db, contract, operator, from_, to, token_id)
        if not proofs or len(proofs) != len(asset.data):
            raise ProofVerificationFailedError(
                f"expected {len(asset.data)} proofs, got {len(proofs)}"
            )

        new_data: list[IntelligentData] = []
        for current, proof in zip(asset.data, proofs):
            if proof.token_id != token_id:
                raise ProofVerificationFailedError(
                    f"proof is for token {proof.token_id}, not {token_id}"
                )
            if proof.old_data_hash.lower() != current.data_hash.lower():
                raise ProofVerificationFailedError(
                    f"proof old hash {proof.old_data_hash} does not match {current.data_hash}"
                )
            if not self._verifier.verify(proof):
                raise ProofVerificationFailedError(f"oracle signature invalid for {proof.nonce}")
            new_data.append(IntelligentData(current.description, proof.new_data_hash.lower()))

        for proof in proofs:
            if not await self._repo.mark_proof_used(db, proof.nonce):
                raise ProofAlreadyUsedError(proof.nonce)

        await self._repo.replace_data(db, contract, token_id, new_data)
        await self._move(db, asset, to, proof_nonces=[p.nonce for p in proofs])

    async def _check_transfer(
        self,
        db: AsyncSession,
        contract: str,
        operator: str,
        from_: str,
        to: str,
        token_id: int,
    ) -> Asset:
        asset = await self.get_asset(db, contract, token_id)
        if asset.owner != from_:
            raise AssetTransferFailedError(f"{from_} is not the owner of token {token_id}")
        if to == ZERO_ADDRESS:
            raise AssetTransferFailedError("transfer to the zero address")
        if operator not in (asset.owner, asset.approved):
            raise NotApprovedError(operator, token_id)
        return asset

    async def _move(
        self, db: AsyncSession, asset: Asset, to: str, proof_nonces: list[str]
    ) -> None:
        await self._repo.update_owner(db, asset.contract, asset.token_id, to)
        await self._events.record_event(
            db,
            EventType.ASSET_TRANSFERRED.value,
            {
                "contract": asset.contract,
                "token_id": asset.token_id,
                "from": asset.owner,
                "to": to,
                "proof_nonces": proof_nonces,
            },
        )
        logger.info(
            "Transferred %s#%d %s -> %s", asset.contract, asset.token_id, asset.owner, to
        )
