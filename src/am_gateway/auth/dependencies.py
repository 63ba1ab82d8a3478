"""FastAPI dependency: get_current_account.

Usage in any protected router:
    from src.am_gateway.auth.dependencies import CurrentAccount

    @router.post("/protected")
    async def protected(account: CurrentAccount):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.am_common.address import to_address
from src.am_common.errors import InvalidAddressError, InvalidCredentialsError
from src.am_gateway.auth.jwt_handler import decode_token

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_account(token: str = Depends(oauth2_scheme)) -> str:
    """Validate the JWT Bearer token and return the caller's checksum address.

    Raises HTTP 401 if the token is missing, invalid, expired, or its subject
    is not an address.
    """
    try:
        payload = decode_token(token)
        return to_address(payload.get("sub"), "sub")
    except (InvalidCredentialsError, InvalidAddressError):
        raise _CREDENTIALS_EXCEPTION from None


CurrentAccount = Annotated[str, Depends(get_current_account)]
