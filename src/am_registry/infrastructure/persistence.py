"""AssetRepository — concrete implementation of AssetRepositoryProtocol.

Assets live in `assets(contract, token_id, ...)`, their payload hashes in
`asset_data(contract, token_id, idx, ...)`. Token ids come from a per-contract
counter bumped by one atomic upsert. Consumed proof nonces go to `used_proofs`.

Transaction ownership: The CALLER (application service or engine) is responsible
for the transaction / savepoint.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.address import ZERO_ADDRESS
from src.am_registry.domain.models import Asset, IntelligentData

_GET_ASSET_SQL = text("""
    SELECT contract, token_id, owner, creator, approved, uri
    FROM assets
    WHERE contract = :contract AND token_id = :token_id
""")

_GET_DATA_SQL = text("""
    SELECT description, data_hash
    FROM asset_data
    WHERE contract = :contract AND token_id = :token_id
    ORDER BY idx
""")

_NEXT_TOKEN_ID_SQL = text("""
    INSERT INTO asset_counters (contract, last_token_id)
    VALUES (:contract, 0)
    ON CONFLICT (contract) DO UPDATE
        SET last_token_id = asset_counters.last_token_id + 1
    RETURNING last_token_id
""")

_INSERT_ASSET_SQL = text("""
    INSERT INTO assets (contract, token_id, owner, creator, approved, uri)
    VALUES (:contract, :token_id, :owner, :creator, :approved, :uri)
""")

_INSERT_DATA_SQL = text("""
    INSERT INTO asset_data (contract, token_id, idx, description, data_hash)
    VALUES (:contract, :token_id, :idx, :description, :data_hash)
""")

_DELETE_DATA_SQL = text("""
    DELETE FROM asset_data WHERE contract = :contract AND token_id = :token_id
""")

_UPDATE_OWNER_SQL = text("""
    UPDATE assets
    SET owner = :owner, approved = :zero, updated_at = NOW()
    WHERE contract = :contract AND token_id = :token_id
""")

_SET_APPROVED_SQL = text("""
    UPDATE assets
    SET approved = :approved, updated_at = NOW()
    WHERE contract = :contract AND token_id = :token_id
""")

_SET_CREATOR_SQL = text("""
    UPDATE assets
    SET creator = :creator, updated_at = NOW()
    WHERE contract = :contract AND token_id = :token_id
""")

_MARK_PROOF_SQL = text("""
    INSERT INTO used_proofs (nonce) VALUES (:nonce)
    ON CONFLICT (nonce) DO NOTHING
    RETURNING nonce
""")


class AssetRepository:
    async def get_asset(self, db: AsyncSession, contract: str, token_id: int) -> Asset | None:
        params = {"contract": contract, "token_id": token_id}
        row = (await db.execute(_GET_ASSET_SQL, params)).fetchone()
        if row is None:
            return None
        data_rows = (await db.execute(_GET_DATA_SQL, params)).fetchall()
        return Asset(
            contract=row.contract,
            token_id=int(row.token_id),
            owner=row.owner,
            creator=row.creator,
            approved=row.approved,
            uri=row.uri,
            data=[IntelligentData(r.description, r.data_hash) for r in data_rows],
        )

    async def next_token_id(self, db: AsyncSession, contract: str) -> int:
        value = (await db.execute(_NEXT_TOKEN_ID_SQL, {"contract": contract})).scalar_one()
        return int(value)

    async def insert_asset(self, db: AsyncSession, asset: Asset) -> Asset:
        await db.execute(
            _INSERT_ASSET_SQL,
            {
                "contract": asset.contract,
                "token_id": asset.token_id,
                "owner": asset.owner,
                "creator": asset.creator,
                "approved": asset.approved,
                "uri": asset.uri,
            },
        )
        await self._insert_data(db, asset.contract, asset.token_id, asset.data)
        return asset

    async def update_owner(
        self, db: AsyncSession, contract: str, token_id: int, owner: str
    ) -> None:
        await db.execute(
            _UPDATE_OWNER_SQL,
            {"contract": contract, "token_id": token_id, "owner": owner, "zero": ZERO_ADDRESS},
        )

    async def set_approved(
        self, db: AsyncSession, contract: str, token_id: int, operator: str
    ) -> None:
        await db.execute(
            _SET_APPROVED_SQL,
            {"contract": contract, "token_id": token_id, "approved": operator},
        )

    async def set_creator(
        self, db: AsyncSession, contract: str, token_id: int, creator: str
    ) -> None:
        await db.execute(
            _SET_CREATOR_SQL,
            {"contract": contract, "token_id": token_id, "creator": creator},
        )

    async def replace_data(
        self, db: AsyncSession, contract: str, token_id: int, data: list[IntelligentData]
    ) -> None:
        await db.execute(_DELETE_DATA_SQL, {"contract": contract, "token_id": token_id})
        await self._insert_data(db, contract, token_id, data)

    async def mark_proof_used(self, db: AsyncSession, nonce: str) -> bool:
        return (await db.execute(_MARK_PROOF_SQL, {"nonce": nonce})).fetchone() is not None

    async def _insert_data(
        self, db: AsyncSession, contract: str, token_id: int, data: list[IntelligentData]
    ) -> None:
        for idx, item in enumerate(data):
            await db.execute(
                _INSERT_DATA_SQL,
                {
                    "contract": contract,
                    "token_id": token_id,
                    "idx": idx,
                    "description": item.description,
                    "data_hash": item.data_hash,
                },
            )
