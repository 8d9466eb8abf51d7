"""Create assistant schema: users, chats, chunks (pgvector), pinecone_ids.

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS vector")
    op.execute("CREATE SCHEMA IF NOT EXISTS assistant")
    op.create_table(
        "users",
        sa.Column("email", sa.String(64), primary_key=True),
        sa.Column("password", sa.String(128), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        schema="assistant",
    )
    op.create_table(
        "chats",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("messages", JSONB(), nullable=False),
        sa.Column("author", sa.String(64), sa.ForeignKey("assistant.users.email"), nullable=False),
        schema="assistant",
    )
    op.create_index("ix_assistant_chats_author", "chats", ["author"], schema="assistant")
    op.create_table(
        "chunks",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        schema="assistant",
    )
    op.execute("ALTER TABLE assistant.chunks ADD COLUMN embedding vector(1536) NOT NULL")
    op.create_index("ix_assistant_chunks_file_path", "chunks", ["file_path"], schema="assistant")
    op.create_table(
        "pinecone_ids",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("vector_ids", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        schema="assistant",
    )
    op.create_index(
        "ix_assistant_pinecone_ids_file_path", "pinecone_ids", ["file_path"], schema="assistant"
    )


def downgrade() -> None:
    op.drop_table("pinecone_ids", schema="assistant")
    op.drop_table("chunks", schema="assistant")
    op.drop_table("chats", schema="assistant")
    op.drop_table("users", schema="assistant")
    op.execute("DROP SCHEMA IF EXISTS assistant")
