"""Pydantic schemas for the asset registry API."""

from pydantic import BaseModel, Field

from src.am_common.address import to_data_hash
from src.am_registry.domain.models import Asset, IntelligentData


class IntelligentDataIn(BaseModel):
    description: str = ""
    data_hash: str = Field(..., description="0x-prefixed bytes32 content hash")

    def to_domain(self) -> IntelligentData:
        return IntelligentData(description=self.description, data_hash=to_data_hash(self.data_hash))


class MintRequest(BaseModel):
    """Market mint: the mint fee is charged from the caller's deposited balance."""
    to: str
    uri: str = ""
    creator: str | None = None
    data: list[IntelligentDataIn] = Field(default_factory=list)


class MintWithRoleRequest(MintRequest):
    """Privileged mint (MINTER role), no fee. `contract` defaults to the platform registry."""
    contract: str | None = None


class ApproveAssetRequest(BaseModel):
    token_id: int = Field(..., ge=0)
    contract: str | None = None
    operator: str | None = Field(None, description="Defaults to the market address")


class SetCreatorRequest(BaseModel):
    token_id: int = Field(..., ge=0)
    creator: str
    contract: str | None = None


class IntelligentDataOut(BaseModel):
    description: str
    data_hash: str


class AssetResponse(BaseModel):
    contract: str
    token_id: int
    owner: str
    creator: str
    approved: str
    uri: str
    data: list[IntelligentDataOut]

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetResponse":
        return cls(
            contract=asset.contract,
            token_id=asset.token_id,
            owner=asset.owner,
            creator=asset.creator,
            approved=asset.approved,
            uri=asset.uri,
            data=[IntelligentDataOut(description=d.description, data_hash=d.data_hash)
                  for d in asset.data],
        )
