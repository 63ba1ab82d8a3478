"""001: create common functions

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # Nonces, proof nonces and content hashes are stored as 0x + 64 lowercase hex.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_is_bytes32_hex(value TEXT)
        RETURNS BOOLEAN AS $$
            SELECT value ~ '^0x[0-9a-f]{64}$';
        $$ LANGUAGE sql IMMUTABLE;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_is_bytes32_hex(TEXT);")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
