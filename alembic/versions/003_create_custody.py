"""003: create custody tables (wallets, token allowances)

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wallets (
            owner       VARCHAR(42)     NOT NULL,
            currency    VARCHAR(42)     NOT NULL,
            balance     NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (owner, currency),
            CONSTRAINT ck_wallets_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE token_allowances (
            token       VARCHAR(42)     NOT NULL,
            owner       VARCHAR(42)     NOT NULL,
            spender     VARCHAR(42)     NOT NULL,
            amount      NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (token, owner, spender),
            CONSTRAINT ck_token_allowances_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE wallets IS 'Value held per (owner, currency); the market vault is the row owned by MARKET_ADDRESS';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS token_allowances CASCADE;")
    op.execute("DROP TABLE IF EXISTS wallets CASCADE;")
