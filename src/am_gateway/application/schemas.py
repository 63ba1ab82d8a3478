"""Pydantic schemas for wallet login."""

from pydantic import BaseModel, Field


class ChallengeRequest(BaseModel):
    address: str = Field(..., description="Wallet address requesting a login challenge")


class ChallengeResponse(BaseModel):
    address: str
    message: str
    expires_in: int


class LoginRequest(BaseModel):
    address: str
    signature: str = Field(..., description="0x-hex personal_sign signature of the challenge")


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    address: str
