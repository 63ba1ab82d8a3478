"""004: create asset registry tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE asset_counters (
            contract        VARCHAR(42)     PRIMARY KEY,
            last_token_id   NUMERIC(78, 0)  NOT NULL
        );
    """)
    op.execute("""
        CREATE TABLE assets (
            contract    VARCHAR(42)     NOT NULL,
            token_id    NUMERIC(78, 0)  NOT NULL,
            owner       VARCHAR(42)     NOT NULL,
            creator     VARCHAR(42)     NOT NULL,
            approved    VARCHAR(42)     NOT NULL,
            uri         TEXT            NOT NULL DEFAULT '',
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (contract, token_id)
        );
    """)
    op.execute("""
        CREATE TABLE asset_data (
            contract    VARCHAR(42)     NOT NULL,
            token_id    NUMERIC(78, 0)  NOT NULL,
            idx         INT             NOT NULL,
            description TEXT            NOT NULL DEFAULT '',
            data_hash   CHAR(66)        NOT NULL,
            PRIMARY KEY (contract, token_id, idx),
            FOREIGN KEY (contract, token_id) REFERENCES assets (contract, token_id),
            CONSTRAINT ck_asset_data_hash CHECK (fn_is_bytes32_hex(data_hash))
        );
    """)
    op.execute("""
        CREATE TABLE used_proofs (
            nonce       CHAR(66)    PRIMARY KEY CHECK (fn_is_bytes32_hex(nonce)),
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_assets_owner ON assets (owner);")
    op.execute("""
        CREATE TRIGGER trg_assets_updated_at
            BEFORE UPDATE ON assets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS used_proofs CASCADE;")
    op.execute("DROP TABLE IF EXISTS asset_data CASCADE;")
    op.execute("DROP TABLE IF EXISTS assets CASCADE;")
    op.execute("DROP TABLE IF EXISTS asset_counters CASCADE;")
