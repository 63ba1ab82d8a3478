"""005: fold schema v1 numeric nonces into the bytes32 replay set

Schema v1 kept consumed order/offer nonces as integers in
`legacy_used_nonces(scope, nonce NUMERIC)`. v2 keys every nonce as 0x-prefixed
32-byte hex, with numeric nonces left-padded, so a legacy nonce stays consumed
under its new spelling. The config row is bumped to schema_version 2.

A fresh database has no legacy table and this revision only records the bump.

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        DO $$
        BEGIN
            IF to_regclass('legacy_used_nonces') IS NOT NULL THEN
                INSERT INTO used_nonces (scope, nonce)
                SELECT scope, '0x' || lpad(to_hex(nonce::BIGINT), 64, '0')
                FROM legacy_used_nonces
                ON CONFLICT (scope, nonce) DO NOTHING;
                DROP TABLE legacy_used_nonces;
            END IF;
        END
        $$;
    """)
    op.execute("UPDATE market_config SET schema_version = 2 WHERE schema_version < 2;")


def downgrade() -> None:
    # Nonces stay consumed; there is no safe way to split them back out.
    op.execute("UPDATE market_config SET schema_version = 1 WHERE schema_version = 2;")
