"""003: create profiles table

Revision ID: 003
Revises: 002
Create Date: 2026-10-01
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE profiles (
            id                  VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            user_id             UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            name                VARCHAR(120)    NOT NULL,
            profile_picture     TEXT,
            resume_url          TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_profiles_user_id UNIQUE (user_id)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_profiles_updated_at
            BEFORE UPDATE ON profiles
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE profiles IS 'One per user; owns exactly one market';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS profiles CASCADE;")
