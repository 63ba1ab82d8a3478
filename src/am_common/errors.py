"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Authorization
  2xxx: Validation (malformed or stale input)
  3xxx: Replay (nonce or proof already consumed)
  4xxx: State (balances, ownership, lifecycle)
  5xxx: External call (collaborator transfer failed)
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Authorization ---

class MissingRoleError(AppError):
    def __init__(self, account: str, role: str) -> None:
        super().__init__(1001, f"Account {account} is missing role {role}", 403)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid or expired credentials", 401)


class InvalidLoginChallengeError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Login challenge is missing, expired or not signed by the account", 401)


# --- 2xxx: Validation ---

class InvalidAddressError(AppError):
    def __init__(self, field: str, value: object) -> None:
        super().__init__(2001, f"Invalid address for {field}: {value!r}", 422)


class FeeRateTooHighError(AppError):
    def __init__(self, rate: int, maximum: int) -> None:
        super().__init__(2002, f"Fee rate too high: {rate} bps (max {maximum})", 422)


class PartnerFeeRateTooHighError(AppError):
    def __init__(self, rate: int) -> None:
        super().__init__(2003, f"Fee share rate too high: {rate} bps (max 10000)", 422)


class InvalidSignatureLengthError(AppError):
    def __init__(self, length: int) -> None:
        super().__init__(2004, f"Invalid signature length: {length} (expected 65)", 422)


class InvalidSignatureError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2005, f"Invalid signature: {detail}", 422)


class OrderExpiredError(AppError):
    def __init__(self, expire_time: int, now: int) -> None:
        super().__init__(2006, f"Order expired at {expire_time} (now {now})", 422)


class OfferExpiredError(AppError):
    def __init__(self, expire_time: int, now: int) -> None:
        super().__init__(2007, f"Offer expired at {expire_time} (now {now})", 422)


class PriceMismatchError(AppError):
    def __init__(self, offered: int, minimum: int) -> None:
        super().__init__(2008, f"Offer price {offered} is below order minimum {minimum}", 422)


class TokenIdMismatchError(AppError):
    def __init__(self, order_token_id: int, offer_token_id: int) -> None:
        super().__init__(
            2009, f"Token id mismatch: order {order_token_id}, offer {offer_token_id}", 422
        )


class ReceiverMismatchError(AppError):
    def __init__(self, receiver: str, buyer: str) -> None:
        super().__init__(2010, f"Order is restricted to {receiver}, buyer is {buyer}", 422)


class UnsupportedAssetContractError(AppError):
    def __init__(self, contract: str) -> None:
        super().__init__(2011, f"Unsupported asset contract: {contract}", 422)


class AssetContractMismatchError(AppError):
    def __init__(self, order_contract: str, offer_contract: str) -> None:
        super().__init__(
            2012,
            f"Asset contract mismatch: order {order_contract}, offer {offer_contract}",
            422,
        )


class ZeroPriceWithValueError(AppError):
    def __init__(self, value: int) -> None:
        super().__init__(2013, f"Zero-price offer must not carry attached value ({value})", 422)


class AttachedValueNotAcceptedError(AppError):
    def __init__(self, value: int) -> None:
        super().__init__(2014, f"Attached value not accepted for this payment ({value})", 422)


class InvalidAmountError(AppError):
    def __init__(self, amount: int) -> None:
        super().__init__(2015, f"Amount must be positive, got {amount}", 422)


class ProtectedRegistryError(AppError):
    def __init__(self, contract: str) -> None:
        super().__init__(2016, f"Platform registry {contract} cannot be removed from whitelist", 422)


class InvalidNonceError(AppError):
    def __init__(self, value: object) -> None:
        super().__init__(2017, f"Invalid nonce: {value!r}", 422)


class UnencodableFieldError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2018, f"Field cannot be ABI-encoded: {detail}", 422)


class InvalidDataHashError(AppError):
    def __init__(self, field: str, value: object) -> None:
        super().__init__(2019, f"Invalid bytes32 hash for {field}: {value!r}", 422)


# --- 3xxx: Replay ---

class OrderAlreadyUsedError(AppError):
    def __init__(self, nonce: str) -> None:
        super().__init__(3001, f"Order nonce already used: {nonce}", 409)


class OfferAlreadyUsedError(AppError):
    def __init__(self, nonce: str) -> None:
        super().__init__(3002, f"Offer nonce already used: {nonce}", 409)


class ProofAlreadyUsedError(AppError):
    def __init__(self, nonce: str) -> None:
        super().__init__(3003, f"Transfer proof nonce already used: {nonce}", 409)


# --- 4xxx: State ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            4001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class InsufficientAllowanceError(AppError):
    def __init__(self, token: str, required: int, allowance: int) -> None:
        super().__init__(
            4002,
            f"Insufficient allowance for {token}: required {required}, approved {allowance}",
            422,
        )


class OwnerMismatchError(AppError):
    def __init__(self, signer: str, owner: str) -> None:
        super().__init__(4003, f"Order signer {signer} is not the asset owner {owner}", 422)


class NothingToWithdrawError(AppError):
    def __init__(self, currency: str) -> None:
        super().__init__(4004, f"No fees to withdraw for currency {currency}", 422)


class MarketPausedError(AppError):
    def __init__(self) -> None:
        super().__init__(4005, "Market is paused", 423)


class MarketNotPausedError(AppError):
    def __init__(self) -> None:
        super().__init__(4006, "Market is not paused", 422)


class ReentrantCallError(AppError):
    def __init__(self) -> None:
        super().__init__(4007, "Reentrant call", 409)


class InsufficientValueError(AppError):
    def __init__(self, required: int, attached: int) -> None:
        super().__init__(
            4008, f"Insufficient attached value: required {required}, attached {attached}", 422
        )


class MarketNotInitializedError(AppError):
    def __init__(self) -> None:
        super().__init__(4009, "Market ledger is not initialized", 503)


class MarketAlreadyInitializedError(AppError):
    def __init__(self) -> None:
        super().__init__(4010, "Market ledger is already initialized", 409)


class AssetNotFoundError(AppError):
    def __init__(self, contract: str, token_id: int) -> None:
        super().__init__(4011, f"Asset not found: {contract}#{token_id}", 404)


class NotApprovedError(AppError):
    def __init__(self, operator: str, token_id: int) -> None:
        super().__init__(4012, f"Operator {operator} is not approved for token {token_id}", 422)


class NotAssetOwnerError(AppError):
    def __init__(self, account: str, token_id: int) -> None:
        super().__init__(4013, f"Account {account} does not own token {token_id}", 403)


# --- 5xxx: External call ---

class AssetTransferFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Asset transfer failed: {detail}", 502)


class ValueTransferFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5002, f"Value transfer failed: {detail}", 502)


class ProofVerificationFailedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5003, f"Transfer proof verification failed: {detail}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class InvariantViolationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Ledger invariant violated: {detail}", 500)
