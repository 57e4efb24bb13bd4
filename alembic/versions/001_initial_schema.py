"""Initial schema: users, categories, tags, activities, time entries, rewards.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            email VARCHAR(255) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Categories & tags (shared, soft-deleted) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS categories (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(50) UNIQUE NOT NULL,
            deleted_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_categories_deleted_at ON categories(deleted_at)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS tags (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(30) UNIQUE NOT NULL,
            deleted_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_tags_deleted_at ON tags(deleted_at)")

    # --- Activities ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS activities (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(200) NOT NULL,
            main_category_id BIGINT NOT NULL REFERENCES categories(id),
            sub_category_id BIGINT REFERENCES categories(id),
            intervals_rewarded INTEGER NOT NULL DEFAULT 0,
            deleted_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_activities_user_id ON activities(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_activities_main_category_id ON activities(main_category_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_activities_sub_category_id ON activities(sub_category_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_activities_deleted_at ON activities(deleted_at)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS activity_tags (
            activity_id BIGINT NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
            tag_id BIGINT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
            PRIMARY KEY (activity_id, tag_id)
        )
    """)

    # --- Time entries (end_time NULL while running) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS time_entries (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            activity_id BIGINT NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
            start_time TIMESTAMPTZ NOT NULL,
            end_time TIMESTAMPTZ,
            notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_entries_user_id ON time_entries(user_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_entries_activity_id ON time_entries(activity_id)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_entries_start_time ON time_entries(start_time)")
    op.execute("CREATE INDEX IF NOT EXISTS ix_time_entries_end_time ON time_entries(end_time)")
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_time_entries_running
        ON time_entries(user_id)
        WHERE end_time IS NULL
    """)

    # --- Rewards ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_rewards (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            activity_id BIGINT REFERENCES activities(id) ON DELETE SET NULL,
            reward_type VARCHAR(16) NOT NULL,
            external_id VARCHAR(128) NOT NULL,
            name VARCHAR(256) NOT NULL,
            image_url TEXT NOT NULL,
            rarity VARCHAR(16) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_user_rewards_user_id ON user_rewards(user_id)")
    op.execute("""
        CREATE TABLE IF NOT EXISTS champion_mastery (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            champion_id VARCHAR(64) NOT NULL,
            champion_name VARCHAR(128) NOT NULL,
            image_url TEXT NOT NULL,
            mastery_level INTEGER NOT NULL DEFAULT 1,
            times_obtained INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT champion_mastery_user_id_champion_id_key UNIQUE (user_id, champion_id)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_champion_mastery_user_id ON champion_mastery(user_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS champion_mastery CASCADE")
    op.execute("DROP TABLE IF EXISTS user_rewards CASCADE")
    op.execute("DROP TABLE IF EXISTS time_entries CASCADE")
    op.execute("DROP TABLE IF EXISTS activity_tags CASCADE")
    op.execute("DROP TABLE IF EXISTS activities CASCADE")
    op.execute("DROP TABLE IF EXISTS tags CASCADE")
    op.execute("DROP TABLE IF EXISTS categories CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
