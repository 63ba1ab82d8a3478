"""MarketLedgerRepository — concrete implementation of MarketLedgerProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING or
INSERT ... ON CONFLICT upserts. A result of 0 rows means a business constraint
was violated (insufficient funds, nonce already present).

Amounts are NUMERIC(78, 0) so any uint256 fits; asyncpg hands them back as
Decimal and the row mappers convert to int.

Transaction ownership: The CALLER (application service or engine) is responsible
for the transaction / savepoint.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.address import NATIVE_CURRENCY
from src.am_common.enums import NonceScope, Role
from src.am_common.errors import InsufficientBalanceError, InternalError
from src.am_ledger.domain.models import LedgerEvent, MarketConfig

# ---------------------------------------------------------------------------
# SQL: configuration row
# ---------------------------------------------------------------------------

_GET_CONFIG_SQL = text("""
    SELECT schema_version, admin, fee_rate, mint_fee, discount_mint_fee,
           asset_registry, paused
    FROM market_config
    WHERE id = 1
""")

_CREATE_CONFIG_SQL = text("""
    INSERT INTO market_config
        (id, schema_version, admin, fee_rate, mint_fee, discount_mint_fee,
         asset_registry, paused)
    VALUES
        (1, :schema_version, :admin, :fee_rate, :mint_fee, :discount_mint_fee,
         :asset_registry, :paused)
    ON CONFLICT (id) DO NOTHING
    RETURNING schema_version, admin, fee_rate, mint_fee, discount_mint_fee,
              asset_registry, paused
""")

_SAVE_CONFIG_SQL = text("""
    UPDATE market_config
    SET schema_version    = :schema_version,
        admin             = :admin,
        fee_rate          = :fee_rate,
        mint_fee          = :mint_fee,
        discount_mint_fee = :discount_mint_fee,
        asset_registry    = :asset_registry,
        paused            = :paused,
        updated_at        = NOW()
    WHERE id = 1
    RETURNING schema_version, admin, fee_rate, mint_fee, discount_mint_fee,
              asset_registry, paused
""")

# ---------------------------------------------------------------------------
# SQL: roles
# ---------------------------------------------------------------------------

_HAS_ROLE_SQL = text("SELECT 1 FROM role_grants WHERE role = :role AND account = :account")

_GRANT_ROLE_SQL = text("""
    INSERT INTO role_grants (role, account) VALUES (:role, :account)
    ON CONFLICT (role, account) DO NOTHING
    RETURNING role
""")

_REVOKE_ROLE_SQL = text("""
    DELETE FROM role_grants WHERE role = :role AND account = :account
    RETURNING role
""")

# ---------------------------------------------------------------------------
# SQL: deposited balances
# ---------------------------------------------------------------------------

_GET_BALANCE_SQL = text("SELECT balance FROM account_balances WHERE account = :account")

_CREDIT_BALANCE_SQL = text("""
    INSERT INTO account_balances (account, balance)
    VALUES (:account, :amount)
    ON CONFLICT (account) DO UPDATE
        SET balance = account_balances.balance + EXCLUDED.balance,
            updated_at = NOW()
    RETURNING balance
""")

_DEBIT_BALANCE_SQL = text("""
    UPDATE account_balances
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE account = :account AND balance >= :amount
    RETURNING balance
""")

# ---------------------------------------------------------------------------
# SQL: fee pools
# ---------------------------------------------------------------------------

_GET_FEE_SQL = text("SELECT amount FROM fee_balances WHERE currency = :currency")

_CREDIT_FEE_SQL = text("""
    INSERT INTO fee_balances (currency, amount)
    VALUES (:currency, :amount)
    ON CONFLICT (currency) DO UPDATE
        SET amount = fee_balances.amount + EXCLUDED.amount,
            updated_at = NOW()
    RETURNING amount
""")

# Zero the pool and hand back what it held, in one statement
_TAKE_FEE_SQL = text("""
    UPDATE fee_balances AS f
    SET amount = 0, updated_at = NOW()
    FROM (
        SELECT currency, amount FROM fee_balances
        WHERE currency = :currency
        FOR UPDATE
    ) AS old
    WHERE f.currency = old.currency
    RETURNING old.amount
""")

_GET_PARTNER_FEE_SQL = text("""
    SELECT amount FROM partner_fee_balances
    WHERE partner = :partner AND currency = :currency
""")

_CREDIT_PARTNER_FEE_SQL = text("""
    INSERT INTO partner_fee_balances (partner, currency, amount)
    VALUES (:partner, :currency, :amount)
    ON CONFLICT (partner, currency) DO UPDATE
        SET amount = partner_fee_balances.amount + EXCLUDED.amount,
            updated_at = NOW()
    RETURNING amount
""")

_TAKE_PARTNER_FEE_SQL = text("""
    UPDATE partner_fee_balances AS p
    SET amount = 0, updated_at = NOW()
    FROM (
        SELECT partner, currency, amount FROM partner_fee_balances
        WHERE partner = :partner AND currency = :currency
        FOR UPDATE
    ) AS old
    WHERE p.partner = old.partner AND p.currency = old.currency
    RETURNING old.amount
""")

_GET_PARTNER_RATE_SQL = text("SELECT rate FROM partner_fee_rates WHERE partner = :partner")

_SET_PARTNER_RATE_SQL = text("""
    INSERT INTO partner_fee_rates (partner, rate)
    VALUES (:partner, :rate)
    ON CONFLICT (partner) DO UPDATE
        SET rate = EXCLUDED.rate,
            updated_at = NOW()
    RETURNING rate
""")

# ---------------------------------------------------------------------------
# SQL: replay sets and whitelist
# ---------------------------------------------------------------------------

_IS_NONCE_USED_SQL = text("SELECT 1 FROM used_nonces WHERE scope = :scope AND nonce = :nonce")

_MARK_NONCE_SQL = text("""
    INSERT INTO used_nonces (scope, nonce) VALUES (:scope, :nonce)
    ON CONFLICT (scope, nonce) DO NOTHING
    RETURNING nonce
""")

_IS_WHITELISTED_SQL = text("SELECT 1 FROM whitelisted_contracts WHERE contract = :contract")

_ADD_WHITELIST_SQL = text("""
    INSERT INTO whitelisted_contracts (contract) VALUES (:contract)
    ON CONFLICT (contract) DO NOTHING
    RETURNING contract
""")

_REMOVE_WHITELIST_SQL = text("""
    DELETE FROM whitelisted_contracts WHERE contract = :contract
    RETURNING contract
""")

# ---------------------------------------------------------------------------
# SQL: solvency
# ---------------------------------------------------------------------------

_POOL_LIABILITIES_SQL = text("""
    SELECT
        (SELECT COALESCE(SUM(amount), 0) FROM fee_balances WHERE currency = :currency)
      + (SELECT COALESCE(SUM(amount), 0) FROM partner_fee_balances WHERE currency = :currency)
""")

_ACCOUNT_LIABILITIES_SQL = text("SELECT COALESCE(SUM(balance), 0) FROM account_balances")

# ---------------------------------------------------------------------------
# SQL: events
# ---------------------------------------------------------------------------

_INSERT_EVENT_SQL = text("""
    INSERT INTO market_events (event_type, payload)
    VALUES (:event_type, CAST(:payload AS JSONB))
    RETURNING id, event_type, payload, created_at
""")

_LIST_EVENTS_SQL = text("""
    SELECT id, event_type, payload, created_at
    FROM market_events
    WHERE (CAST(:event_type AS VARCHAR) IS NULL OR event_type = :event_type)
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_config(row: object) -> MarketConfig:
    return MarketConfig(
        admin=row.admin,  # type: ignore[attr-defined]
        fee_rate=int(row.fee_rate),  # type: ignore[attr-defined]
        mint_fee=int(row.mint_fee),  # type: ignore[attr-defined]
        discount_mint_fee=int(row.discount_mint_fee),  # type: ignore[attr-defined]
        asset_registry=row.asset_registry,  # type: ignore[attr-defined]
        paused=bool(row.paused),  # type: ignore[attr-defined]
        schema_version=int(row.schema_version),  # type: ignore[attr-defined]
    )


def _row_to_event(row: object) -> LedgerEvent:
    payload = row.payload  # type: ignore[attr-defined]
    if isinstance(payload, str):
        payload = json.loads(payload)
    return LedgerEvent(
        id=row.id,  # type: ignore[attr-defined]
        event_type=row.event_type,  # type: ignore[attr-defined]
        payload=payload,
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _config_params(config: MarketConfig) -> dict[str, Any]:
    return {
        "schema_version": config.schema_version,
        "admin": config.admin,
        "fee_rate": config.fee_rate,
        "mint_fee": config.mint_fee,
        "discount_mint_fee": config.discount_mint_fee,
        "asset_registry": config.asset_registry,
        "paused": config.paused,
    }


async def _scalar_int(db: AsyncSession, sql: Any, params: dict[str, Any]) -> int:
    value = (await db.execute(sql, params)).scalar_one_or_none()
    return int(value) if value is not None else 0


class MarketLedgerRepository:
    """Concrete repository — all operations atomic at the SQL level."""

    async def get_config(self, db: AsyncSession) -> MarketConfig | None:
        row = (await db.execute(_GET_CONFIG_SQL)).fetchone()
        return _row_to_config(row) if row else None

    async def create_config(self, db: AsyncSession, config: MarketConfig) -> MarketConfig:
        row = (await db.execute(_CREATE_CONFIG_SQL, _config_params(config))).fetchone()
        if row is None:
            raise InternalError("market_config row already exists")
        return _row_to_config(row)

    async def save_config(self, db: AsyncSession, config: MarketConfig) -> MarketConfig:
        row = (await db.execute(_SAVE_CONFIG_SQL, _config_params(config))).fetchone()
        if row is None:
            raise InternalError("market_config row missing on update")
        return _row_to_config(row)

    async def has_role(self, db: AsyncSession, role: Role, account: str) -> bool:
        result = await db.execute(_HAS_ROLE_SQL, {"role": role.value, "account": account})
        return result.fetchone() is not None

    async def grant_role(self, db: AsyncSession, role: Role, account: str) -> bool:
        result = await db.execute(_GRANT_ROLE_SQL, {"role": role.value, "account": account})
        return result.fetchone() is not None

    async def revoke_role(self, db: AsyncSession, role: Role, account: str) -> bool:
        result = await db.execute(_REVOKE_ROLE_SQL, {"role": role.value, "account": account})
        return result.fetchone() is not None

    async def get_balance(self, db: AsyncSession, account: str) -> int:
        return await _scalar_int(db, _GET_BALANCE_SQL, {"account": account})

    async def credit_balance(self, db: AsyncSession, account: str, amount: int) -> int:
        return await _scalar_int(db, _CREDIT_BALANCE_SQL, {"account": account, "amount": amount})

    async def debit_balance(self, db: AsyncSession, account: str, amount: int) -> int:
        result = await db.execute(_DEBIT_BALANCE_SQL, {"account": account, "amount": amount})
        row = result.fetchone()
        if row is None:
            available = await self.get_balance(db, account)
            raise InsufficientBalanceError(amount, available)
        return int(row.balance)

    async def get_fee_balance(self, db: AsyncSession, currency: str) -> int:
        return await _scalar_int(db, _GET_FEE_SQL, {"currency": currency})

    async def credit_fee(self, db: AsyncSession, currency: str, amount: int) -> int:
        return await _scalar_int(db, _CREDIT_FEE_SQL, {"currency": currency, "amount": amount})

    async def take_fee_balance(self, db: AsyncSession, currency: str) -> int:
        return await _scalar_int(db, _TAKE_FEE_SQL, {"currency": currency})

    async def get_partner_fee_balance(
        self, db: AsyncSession, partner: str, currency: str
    ) -> int:
        return await _scalar_int(
            db, _GET_PARTNER_FEE_SQL, {"partner": partner, "currency": currency}
        )

    async def credit_partner_fee(
        self, db: AsyncSession, partner: str, currency: str, amount: int
    ) -> int:
        return await _scalar_int(
            db,
            _CREDIT_PARTNER_FEE_SQL,
            {"partner": partner, "currency": currency, "amount": amount},
        )

    async def take_partner_fee_balance(
        self, db: AsyncSession, partner: str, currency: str
    ) -> int:
        return await _scalar_int(
            db, _TAKE_PARTNER_FEE_SQL, {"partner": partner, "currency": currency}
        )

    async def get_partner_fee_rate(self, db: AsyncSession, partner: str) -> int:
        return await _scalar_int(db, _GET_PARTNER_RATE_SQL, {"partner": partner})

    async def set_partner_fee_rate(self, db: AsyncSession, partner: str, rate: int) -> int:
        return await _scalar_int(db, _SET_PARTNER_RATE_SQL, {"partner": partner, "rate": rate})

    async def is_nonce_used(self, db: AsyncSession, scope: NonceScope, nonce: str) -> bool:
        result = await db.execute(_IS_NONCE_USED_SQL, {"scope": scope.value, "nonce": nonce})
        return result.fetchone() is not None

    async def mark_nonce_used(self, db: AsyncSession, scope: NonceScope, nonce: str) -> bool:
        result = await db.execute(_MARK_NONCE_SQL, {"scope": scope.value, "nonce": nonce})
        return result.fetchone() is not None

    async def is_whitelisted(self, db: AsyncSession, contract: str) -> bool:
        result = await db.execute(_IS_WHITELISTED_SQL, {"contract": contract})
        return result.fetchone() is not None

    async def add_whitelisted(self, db: AsyncSession, contract: str) -> bool:
        result = await db.execute(_ADD_WHITELIST_SQL, {"contract": contract})
        return result.fetchone() is not None

    async def remove_whitelisted(self, db: AsyncSession, contract: str) -> bool:
        result = await db.execute(_REMOVE_WHITELIST_SQL, {"contract": contract})
        return result.fetchone() is not None

    async def total_liabilities(self, db: AsyncSession, currency: str) -> int:
        pools = await _scalar_int(db, _POOL_LIABILITIES_SQL, {"currency": currency})
        if currency != NATIVE_CURRENCY:
            return pools
        # Deposited balances are always native-denominated
        return pools + await _scalar_int(db, _ACCOUNT_LIABILITIES_SQL, {})

    async def record_event(
        self, db: AsyncSession, event_type: str, payload: dict[str, Any]
    ) -> LedgerEvent:
        result = await db.execute(
            _INSERT_EVENT_SQL,
            {"event_type": event_type, "payload": json.dumps(payload)},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Event insert returned no rows — this should never happen")
        return _row_to_event(row)

    async def list_events(
        self,
        db: AsyncSession,
        event_type: str | None,
        cursor_id: int | None,
        limit: int,
    ) -> list[LedgerEvent]:
        result = await db.execute(
            _LIST_EVENTS_SQL,
            {"event_type": event_type, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_event(row) for row in result.fetchall()]
