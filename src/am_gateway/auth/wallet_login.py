"""Wallet-signature login.

1. `issue_challenge(address)` stores a random challenge in Redis with a TTL.
2. The wallet signs the challenge text (EIP-191 personal message).
3. `login(address, signature)` recovers the signer, deletes the challenge
   (one-shot) and returns a JWT whose subject is the address.
"""

import logging
import secrets

import redis.asyncio as aioredis
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import decode_hex

from config.settings import settings
from src.am_common.address import to_address
from src.am_common.errors import InvalidLoginChallengeError
from src.am_gateway.auth.jwt_handler import create_access_token

logger = logging.getLogger(__name__)

_CHALLENGE_KEY = "login_challenge:{address}"


def challenge_text(address: str, nonce: str) -> str:
    return f"{settings.APP_NAME} login\naddress: {address}\nnonce: {nonce}"


class WalletLoginService:
    """Stateless service — instantiate once, reuse across requests."""

    async def issue_challenge(self, redis: aioredis.Redis, address: str) -> str:
        address = to_address(address, "address")
        message = challenge_text(address, secrets.token_hex(16))
        await redis.set(
            _CHALLENGE_KEY.format(address=address),
            message,
            ex=settings.LOGIN_CHALLENGE_TTL_SECONDS,
        )
        return message

    async def login(self, redis: aioredis.Redis, address: str, signature: str) -> str:
        address = to_address(address, "address")
        key = _CHALLENGE_KEY.format(address=address)
        message = await redis.get(key)
        if message is None:
            raise InvalidLoginChallengeError()

        try:
            signer = Account.recover_message(
                encode_defunct(text=message), signature=decode_hex(signature)
            )
        except Exception:
            logger.info("Login signature for %s could not be recovered", address)
            raise InvalidLoginChallengeError() from None
        if signer != address:
            logger.info("Login signature for %s recovered to %s", address, signer)
            raise InvalidLoginChallengeError()

        await redis.delete(key)
        logger.info("Wallet %s logged in", address)
        return create_access_token(address)
