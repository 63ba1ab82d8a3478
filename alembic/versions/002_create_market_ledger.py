"""002: create market ledger tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# uint256 amounts: NUMERIC(78, 0) holds 2**256 - 1
_AMOUNT = "NUMERIC(78, 0)"


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_config (
            id                  SMALLINT    PRIMARY KEY,
            schema_version      INT         NOT NULL,
            admin               VARCHAR(42) NOT NULL,
            fee_rate            INT         NOT NULL,
            mint_fee            NUMERIC(78, 0) NOT NULL DEFAULT 0,
            discount_mint_fee   NUMERIC(78, 0) NOT NULL DEFAULT 0,
            asset_registry      VARCHAR(42) NOT NULL,
            paused              BOOLEAN     NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_config_singleton CHECK (id = 1),
            CONSTRAINT ck_market_config_fee_rate  CHECK (fee_rate BETWEEN 0 AND 1000),
            CONSTRAINT ck_market_config_mint_fees CHECK (mint_fee >= 0 AND discount_mint_fee >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE role_grants (
            role        VARCHAR(32) NOT NULL,
            account     VARCHAR(42) NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (role, account),
            CONSTRAINT ck_role_grants_role CHECK (
                role IN ('ADMIN', 'PAUSER', 'OPERATOR', 'DISCOUNTED_MINTER', 'MINTER')
            )
        );
    """)
    op.execute(f"""
        CREATE TABLE account_balances (
            account     VARCHAR(42) PRIMARY KEY,
            balance     {_AMOUNT}   NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_account_balances_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute(f"""
        CREATE TABLE fee_balances (
            currency    VARCHAR(42) PRIMARY KEY,
            amount      {_AMOUNT}   NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_fee_balances_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute(f"""
        CREATE TABLE partner_fee_balances (
            partner     VARCHAR(42) NOT NULL,
            currency    VARCHAR(42) NOT NULL,
            amount      {_AMOUNT}   NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (partner, currency),
            CONSTRAINT ck_partner_fee_balances_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE partner_fee_rates (
            partner     VARCHAR(42) PRIMARY KEY,
            rate        INT         NOT NULL,
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_partner_fee_rates_range CHECK (rate BETWEEN 0 AND 10000)
        );
    """)
    op.execute("""
        CREATE TABLE used_nonces (
            scope       VARCHAR(8)  NOT NULL,
            nonce       CHAR(66)    NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (scope, nonce),
            CONSTRAINT ck_used_nonces_scope CHECK (scope IN ('ORDER', 'OFFER')),
            CONSTRAINT ck_used_nonces_hex CHECK (fn_is_bytes32_hex(nonce))
        );
    """)
    op.execute("""
        CREATE TABLE whitelisted_contracts (
            contract    VARCHAR(42) PRIMARY KEY,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TABLE market_events (
            id          BIGSERIAL   PRIMARY KEY,
            event_type  VARCHAR(40) NOT NULL,
            payload     JSONB       NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_market_events_type ON market_events (event_type, id);")
    for table in ("market_config", "account_balances"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)
    op.execute("COMMENT ON TABLE used_nonces IS 'Consumed order/offer nonces — append-only, never expired';")
    op.execute("COMMENT ON TABLE market_events IS 'Structured state-change records for external indexing — append-only';")


def downgrade() -> None:
    for table in (
        "market_events",
        "whitelisted_contracts",
        "used_nonces",
        "partner_fee_rates",
        "partner_fee_balances",
        "fee_balances",
        "account_balances",
        "role_grants",
        "market_config",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")
