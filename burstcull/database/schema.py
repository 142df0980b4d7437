"""
Database schema initialization and migrations.

Provides schema versioning and table creation for the photo library.
"""

from __future__ import annotations

import sqlite3


# Schema version - increment when changing table structure
SCHEMA_VERSION = 1


def initialize_schema(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema with versioning support.

    Creates tables and indexes if they don't exist. Drops and recreates
    tables if the stored schema version is older.

    Args:
        conn: Active database connection

    Tables created:
        - meta: Schema version tracking
        - images: Imported image records
        - image_groups: Near-duplicate groups
        - group_members: Ordered membership of each group
        - project: Single row of aggregate statistics
    """
    conn.execute("""
        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT
        )
    """)

    result = conn.execute(
        "SELECT value FROM meta WHERE key = 'schema_version'"
    ).fetchone()

    current_version = int(result['value']) if result else 0

    if current_version < SCHEMA_VERSION:
        conn.execute("DROP TABLE IF EXISTS group_members")
        conn.execute("DROP TABLE IF EXISTS images")
        conn.execute("DROP TABLE IF EXISTS image_groups")
        conn.execute("DROP TABLE IF EXISTS project")

    conn.execute("""
        CREATE TABLE IF NOT EXISTS image_groups (
            id TEXT PRIMARY KEY,
            auto_pick_id TEXT,
            created_at TEXT NOT NULL,
            modified_at TEXT NOT NULL
        )
    """)

    # rowid order is import order, which grouping relies on
    conn.execute("""
        CREATE TABLE IF NOT EXISTS images (
            id TEXT PRIMARY KEY,
            file_name TEXT NOT NULL,
            file_path TEXT UNIQUE NOT NULL,
            preview_ref TEXT,

            -- Similarity
            phash TEXT,

            -- Quality signals
            focus_score REAL,
            exposure_score REAL,
            faces TEXT,

            -- Culling
            rating INTEGER NOT NULL DEFAULT 0 CHECK (rating BETWEEN 0 AND 5),
            flag TEXT CHECK (flag IN ('pick', 'reject')),

            -- Grouping
            group_id TEXT REFERENCES image_groups(id),
            is_auto_pick INTEGER NOT NULL DEFAULT 0,

            created_at TEXT NOT NULL,
            modified_at TEXT NOT NULL
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS group_members (
            group_id TEXT NOT NULL REFERENCES image_groups(id) ON DELETE CASCADE,
            image_id TEXT NOT NULL REFERENCES images(id),
            position INTEGER NOT NULL,
            PRIMARY KEY (group_id, position)
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS project (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            total_images INTEGER NOT NULL DEFAULT 0,
            rated_images INTEGER NOT NULL DEFAULT 0,
            picks INTEGER NOT NULL DEFAULT 0,
            rejects INTEGER NOT NULL DEFAULT 0,
            group_count INTEGER NOT NULL DEFAULT 0,
            updated_at TEXT
        )
    """)

    conn.execute("CREATE INDEX IF NOT EXISTS idx_images_group_id ON images(group_id)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_images_flag ON images(flag)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_members_image_id ON group_members(image_id)")

    conn.execute("INSERT OR IGNORE INTO project (id) VALUES (1)")

    conn.execute("""
        INSERT OR REPLACE INTO meta (key, value)
        VALUES ('schema_version', ?)
    """, (str(SCHEMA_VERSION),))


__all__ = ['SCHEMA_VERSION', 'initialize_schema']
