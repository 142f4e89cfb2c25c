"""004: create markets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE markets (
            id              VARCHAR(64)         PRIMARY KEY DEFAULT gen_random_uuid()::text,
            profile_id      VARCHAR(64)         NOT NULL REFERENCES profiles (id) ON DELETE CASCADE,
            title           VARCHAR(300)        NOT NULL,
            description     TEXT,
            status          VARCHAR(20)         NOT NULL DEFAULT 'active',
            current_line    DOUBLE PRECISION    NOT NULL,
            initial_line    DOUBLE PRECISION    NOT NULL,
            over_votes      INT                 NOT NULL DEFAULT 0,
            under_votes     INT                 NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_markets_profile_id        UNIQUE (profile_id),
            CONSTRAINT ck_markets_status            CHECK (status IN ('active', 'closed')),
            CONSTRAINT ck_markets_current_line      CHECK (current_line >= 10 AND current_line <= 100),
            CONSTRAINT ck_markets_over_votes_gte_0  CHECK (over_votes >= 0),
            CONSTRAINT ck_markets_under_votes_gte_0 CHECK (under_votes >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_markets_status_line ON markets (status, current_line DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Over/under line per profile — tallies and current line';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
