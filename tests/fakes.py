"""In-memory fakes for the ledger, custody and registry Protocols.

FakeSession mimics the transaction surface the domain uses: `begin_nested()`
snapshots every registered store and restores it if the block raises,
`rollback()` returns to the last `commit()`.
"""

import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from eth_keys import keys
from eth_utils import to_checksum_address

from src.am_admin.domain.gate import AccessGate
from src.am_common.address import NATIVE_CURRENCY, ZERO_ADDRESS
from src.am_common.enums import NonceScope, Operation, Role
from src.am_common.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    ValueTransferFailedError,
)
from src.am_ledger.domain.models import LedgerEvent, MarketConfig
from src.am_registry.domain.models import Asset, IntelligentData

MARKET = to_checksum_address("0x000000000000000000000000000000000000a11e")
REGISTRY = to_checksum_address("0x00000000000000000000000000000000000a6e47")
DEFAULT_PAUSE_GUARDED = frozenset(
    {Operation.FULFILL, Operation.DEPOSIT, Operation.WITHDRAW, Operation.MINT}
)


class _Snapshotting:
    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self.__dict__)

    def restore(self, state: dict[str, Any]) -> None:
        self.__dict__.clear()
        self.__dict__.update(copy.deepcopy(state))


class FakeSession:
    def __init__(self, *stores: _Snapshotting) -> None:
        self._stores = stores
        self._committed = [s.snapshot() for s in stores]
        self.commits = 0
        self.rollbacks = 0
        self.savepoints = 0

    @asynccontextmanager
    async def begin_nested(self) -> AsyncIterator[None]:
        self.savepoints += 1
        saved = [s.snapshot() for s in self._stores]
        try:
            yield
        except BaseException:
            for store, state in zip(self._stores, saved):
                store.restore(state)
            raise

    async def commit(self) -> None:
        self.commits += 1
        self._committed = [s.snapshot() for s in self._stores]

    async def rollback(self) -> None:
        self.rollbacks += 1
        for store, state in zip(self._stores, self._committed):
            store.restore(state)


class FakeMarketLedger(_Snapshotting):
    def __init__(self) -> None:
        self.config: MarketConfig | None = None
        self.roles: set[tuple[Role, str]] = set()
        self.balances: dict[str, int] = {}
        self.fees: dict[str, int] = {}
        self.partner_fees: dict[tuple[str, str], int] = {}
        self.partner_rates: dict[str, int] = {}
        self.nonces: set[tuple[NonceScope, str]] = set()
        self.whitelist: set[str] = set()
        self.events: list[LedgerEvent] = []

    def event_types(self) -> list[str]:
        return [e.event_type for e in self.events]

    async def get_config(self, db: Any) -> MarketConfig | None:
        return self.config

    async def create_config(self, db: Any, config: MarketConfig) -> MarketConfig:
        assert self.config is None
        self.config = config
        return config

    async def save_config(self, db: Any, config: MarketConfig) -> MarketConfig:
        self.config = config
        return config

    async def has_role(self, db: Any, role: Role, account: str) -> bool:
        return (role, account) in self.roles

    async def grant_role(self, db: Any, role: Role, account: str) -> bool:
        if (role, account) in self.roles:
            return False
        self.roles.add((role, account))
        return True

    async def revoke_role(self, db: Any, role: Role, account: str) -> bool:
        if (role, account) not in self.roles:
            return False
        self.roles.discard((role, account))
        return True

    async def get_balance(self, db: Any, account: str) -> int:
        return self.balances.get(account, 0)

    async def credit_balance(self, db: Any, account: str, amount: int) -> int:
        self.balances[account] = self.balances.get(account, 0) + amount
        return self.balances[account]

    async def debit_balance(self, db: Any, account: str, amount: int) -> int:
        available = self.balances.get(account, 0)
        if available < amount:
            raise InsufficientBalanceError(amount, available)
        self.balances[account] = available - amount
        return self.balances[account]

    async def get_fee_balance(self, db: Any, currency: str) -> int:
        return self.fees.get(currency, 0)

    async def credit_fee(self, db: Any, currency: str, amount: int) -> int:
        self.fees[currency] = self.fees.get(currency, 0) + amount
        return self.fees[currency]

    async def take_fee_balance(self, db: Any, currency: str) -> int:
        return self.fees.pop(currency, 0)

    async def get_partner_fee_balance(self, db: Any, partner: str, currency: str) -> int:
        return self.partner_fees.get((partner, currency), 0)

    async def credit_partner_fee(
        self, db: Any, partner: str, currency: str, amount: int
    ) -> int:
        key = (partner, currency)
        self.partner_fees[key] = self.partner_fees.get(key, 0) + amount
        return self.partner_fees[key]

    async def take_partner_fee_balance(self, db: Any, partner: str, currency: str) -> int:
        return self.partner_fees.pop((partner, currency), 0)

    async def get_partner_fee_rate(self, db: Any, partner: str) -> int:
        return self.partner_rates.get(partner, 0)

    async def set_partner_fee_rate(self, db: Any, partner: str, rate: int) -> int:
        self.partner_rates[partner] = rate
        return rate

    async def is_nonce_used(self, db: Any, scope: NonceScope, nonce: str) -> bool:
        return (scope, nonce) in self.nonces

    async def mark_nonce_used(self, db: Any, scope: NonceScope, nonce: str) -> bool:
        if (scope, nonce) in self.nonces:
            return False
        self.nonces.add((scope, nonce))
        return True

    async def is_whitelisted(self, db: Any, contract: str) -> bool:
        return contract in self.whitelist

    async def add_whitelisted(self, db: Any, contract: str) -> bool:
        if contract in self.whitelist:
            return False
        self.whitelist.add(contract)
        return True

    async def remove_whitelisted(self, db: Any, contract: str) -> bool:
        if contract not in self.whitelist:
            return False
        self.whitelist.discard(contract)
        return True

    async def total_liabilities(self, db: Any, currency: str) -> int:
        total = self.fees.get(currency, 0)
        total += sum(v for (_, c), v in self.partner_fees.items() if c == currency)
        if currency == NATIVE_CURRENCY:
            total += sum(self.balances.values())
        return total

    async def record_event(
        self, db: Any, event_type: str, payload: dict[str, Any]
    ) -> LedgerEvent:
        event = LedgerEvent(id=len(self.events) + 1, event_type=event_type, payload=payload)
        self.events.append(event)
        return event

    async def list_events(
        self, db: Any, event_type: str | None, cursor_id: int | None, limit: int
    ) -> list[LedgerEvent]:
        items = [
            e for e in reversed(self.events)
            if (event_type is None or e.event_type == event_type)
            and (cursor_id is None or e.id < cursor_id)
        ]
        return items[:limit]


class FakeValueGateway(_Snapshotting):
    """Wallets keyed by (owner, currency); `fail_sends_to` makes payouts to an address fail."""

    def __init__(self, vault: str = MARKET) -> None:
        self._vault = vault
        self.wallets: dict[tuple[str, str], int] = {}
        self.allowances: dict[tuple[str, str, str], int] = {}
        self.fail_sends_to: set[str] = set()

    @property
    def vault(self) -> str:
        return self._vault

    def fund(self, owner: str, amount: int, currency: str = NATIVE_CURRENCY) -> None:
        key = (owner, currency)
        self.wallets[key] = self.wallets.get(key, 0) + amount

    def held(self, owner: str, currency: str = NATIVE_CURRENCY) -> int:
        return self.wallets.get((owner, currency), 0)

    def _move(self, currency: str, source: str, to: str, amount: int) -> None:
        if amount == 0:
            return
        if to in self.fail_sends_to:
            raise ValueTransferFailedError(f"recipient {to} rejected the transfer")
        available = self.held(source, currency)
        if available < amount:
            raise ValueTransferFailedError(
                f"{source} holds {available} of {currency}, cannot send {amount}"
            )
        self.wallets[(source, currency)] = available - amount
        self.fund(to, amount, currency)

    async def receive_native(self, db: Any, sender: str, amount: int) -> None:
        self._move(NATIVE_CURRENCY, sender, self._vault, amount)

    async def send_native(self, db: Any, to: str, amount: int) -> None:
        self._move(NATIVE_CURRENCY, self._vault, to, amount)

    async def token_transfer_from(
        self, db: Any, token: str, owner: str, to: str, amount: int
    ) -> None:
        if amount == 0:
            return
        key = (token, owner, self._vault)
        allowance = self.allowances.get(key, 0)
        if allowance < amount:
            raise InsufficientAllowanceError(token, amount, allowance)
        self.allowances[key] = allowance - amount
        self._move(token, owner, to, amount)

    async def token_transfer(self, db: Any, token: str, to: str, amount: int) -> None:
        self._move(token, self._vault, to, amount)

    async def holdings(self, db: Any, owner: str, currency: str) -> int:
        return self.held(owner, currency)

    async def allowance(self, db: Any, token: str, owner: str, spender: str) -> int:
        return self.allowances.get((token, owner, spender), 0)

    async def approve(
        self, db: Any, token: str, owner: str, spender: str, amount: int
    ) -> None:
        self.allowances[(token, owner, spender)] = amount

    async def credit_wallet(self, db: Any, owner: str, currency: str, amount: int) -> int:
        self.fund(owner, amount, currency)
        return self.held(owner, currency)


class FakeAssetRepository(_Snapshotting):
    def __init__(self) -> None:
        self.assets: dict[tuple[str, int], Asset] = {}
        self.counters: dict[str, int] = {}
        self.used_proofs: set[str] = set()

    def put(
        self,
        contract: str,
        token_id: int,
        owner: str,
        creator: str = ZERO_ADDRESS,
        approved: str = ZERO_ADDRESS,
        data: list[IntelligentData] | None = None,
    ) -> Asset:
        asset = Asset(
            contract=contract,
            token_id=token_id,
            owner=owner,
            creator=creator,
            approved=approved,
            data=list(data or []),
        )
        self.assets[(contract, token_id)] = asset
        self.counters[contract] = max(self.counters.get(contract, token_id), token_id)
        return asset

    async def get_asset(self, db: Any, contract: str, token_id: int) -> Asset | None:
        asset = self.assets.get((contract, token_id))
        return copy.deepcopy(asset) if asset else None

    async def next_token_id(self, db: Any, contract: str) -> int:
        nxt = self.counters[contract] + 1 if contract in self.counters else 0
        self.counters[contract] = nxt
        return nxt

    async def insert_asset(self, db: Any, asset: Asset) -> Asset:
        self.assets[(asset.contract, asset.token_id)] = copy.deepcopy(asset)
        return asset

    async def update_owner(self, db: Any, contract: str, token_id: int, owner: str) -> None:
        asset = self.assets[(contract, token_id)]
        asset.owner = owner
        asset.approved = ZERO_ADDRESS

    async def set_approved(
        self, db: Any, contract: str, token_id: int, operator: str
    ) -> None:
        self.assets[(contract, token_id)].approved = operator

    async def set_creator(self, db: Any, contract: str, token_id: int, creator: str) -> None:
        self.assets[(contract, token_id)].creator = creator

    async def replace_data(
        self, db: Any, contract: str, token_id: int, data: list[IntelligentData]
    ) -> None:
        self.assets[(contract, token_id)].data = list(data)

    async def mark_proof_used(self, db: Any, nonce: str) -> bool:
        if nonce in self.used_proofs:
            return False
        self.used_proofs.add(nonce)
        return True


def make_config(**overrides: Any) -> MarketConfig:
    values: dict[str, Any] = {
        "admin": ZERO_ADDRESS,
        "fee_rate": 250,
        "mint_fee": 0,
        "discount_mint_fee": 0,
        "asset_registry": REGISTRY,
    }
    values.update(overrides)
    return MarketConfig(**values)


def make_gate(
    ledger: FakeMarketLedger, pause_guarded: frozenset[Operation] = DEFAULT_PAUSE_GUARDED
) -> AccessGate:
    return AccessGate(ledger, pause_guarded)


def sign_digest(private_key: bytes, digest: bytes) -> bytes:
    """65-byte r || s || v signature over a raw 32-byte digest, v in {27, 28}."""
    signature = keys.PrivateKey(private_key).sign_msg_hash(digest)
    raw = signature.to_bytes()
    return raw[:64] + bytes([raw[64] + 27])


def address_of(private_key: bytes) -> str:
    return keys.PrivateKey(private_key).public_key.to_checksum_address()
