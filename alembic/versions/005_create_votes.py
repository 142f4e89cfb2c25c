"""005: create votes table

Revision ID: 005
Revises: 004
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE votes (
            id              VARCHAR(64)         PRIMARY KEY DEFAULT gen_random_uuid()::text,
            user_id         UUID                NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            market_id       VARCHAR(64)         NOT NULL REFERENCES markets (id) ON DELETE CASCADE,
            side            VARCHAR(10)         NOT NULL,
            line_at_vote    DOUBLE PRECISION    NOT NULL,
            created_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_votes_user_market UNIQUE (user_id, market_id),
            CONSTRAINT ck_votes_side        CHECK (side IN ('over', 'under'))
        );
    """)
    op.execute("CREATE INDEX idx_votes_market_id ON votes (market_id);")
    op.execute("CREATE INDEX idx_votes_user_created ON votes (user_id, created_at DESC);")
    op.execute("COMMENT ON TABLE votes IS 'One vote per (user, market); immutable audit of line_at_vote';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS votes CASCADE;")
