"""catalog schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from musicat.adapters.sqlalchemy.mappings import ThumbnailListType, UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
    ]


def _link_fk(name: str, target: str) -> sa.Column[object]:
    return sa.Column(
        name, sa.Uuid(), sa.ForeignKey(f"{target}.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "artists",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("channel_id", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("thumbnails", ThumbnailListType(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("key"),
    )
    op.create_index("ix_artists_channel_id", "artists", ["channel_id"])

    op.create_table(
        "albums",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("cover_url", sa.String(), nullable=True),
        sa.Column("album_type", sa.String(32), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("source", sa.String(32), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("external_id"),
    )
    op.create_table(
        "playlists",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("cover_url", sa.String(), nullable=True),
        sa.Column("playlist_type", sa.String(32), nullable=True),
        sa.Column("source", sa.String(32), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("external_id"),
    )
    op.create_table(
        "tracks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("external_id", sa.String(11), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("duration_sec", sa.Integer(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("is_video", sa.Boolean(), nullable=True),
        sa.Column("source", sa.String(32), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("external_id"),
    )

    op.create_table(
        "artist_albums",
        _link_fk("artist_id", "artists"),
        _link_fk("album_id", "albums"),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.UniqueConstraint("artist_id", "album_id"),
    )
    op.create_table(
        "artist_playlists",
        _link_fk("artist_id", "artists"),
        _link_fk("playlist_id", "playlists"),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.UniqueConstraint("artist_id", "playlist_id"),
    )
    op.create_table(
        "artist_tracks",
        _link_fk("artist_id", "artists"),
        _link_fk("track_id", "tracks"),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.UniqueConstraint("artist_id", "track_id"),
    )
    op.create_table(
        "album_tracks",
        _link_fk("album_id", "albums"),
        _link_fk("track_id", "tracks"),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.UniqueConstraint("album_id", "track_id"),
    )
    op.create_table(
        "playlist_tracks",
        _link_fk("playlist_id", "playlists"),
        _link_fk("track_id", "tracks"),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.UniqueConstraint("playlist_id", "track_id"),
    )


def downgrade() -> None:
    for table in (
        "playlist_tracks",
        "album_tracks",
        "artist_tracks",
        "artist_playlists",
        "artist_albums",
        "tracks",
        "playlists",
        "albums",
    ):
        op.drop_table(table)
    op.drop_index("ix_artists_channel_id", table_name="artists")
    op.drop_table("artists")
