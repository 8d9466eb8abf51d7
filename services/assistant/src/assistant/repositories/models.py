"""SQLAlchemy models for assistant schema (users, chats, chunks, vector id tracking)."""
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

EMBEDDING_DIM = 1536


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"schema": "assistant"}

    email: Mapped[str] = mapped_column(String(64), primary_key=True)
    password: Mapped[str | None] = mapped_column(String(128), nullable=True)  # argon2 hash
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")  # user | admin


class Chat(Base):
    __tablename__ = "chats"
    __table_args__ = {"schema": "assistant"}

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    messages: Mapped[list] = mapped_column(JSONB, nullable=False)
    author: Mapped[str] = mapped_column(
        String(64), ForeignKey("assistant.users.email"), nullable=False, index=True
    )


class Chunk(Base):
    __tablename__ = "chunks"
    __table_args__ = {"schema": "assistant"}

    id: Mapped[str] = mapped_column(Text, primary_key=True)  # "{file_path}/{index}"
    file_path: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(Vector(EMBEDDING_DIM), nullable=False)


class VectorIdTracking(Base):
    """Vector ids written to the hosted index per file path.

    The index cannot delete by metadata filter, so deletes go through this table.
    """

    __tablename__ = "pinecone_ids"
    __table_args__ = {"schema": "assistant"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    vector_ids: Mapped[str] = mapped_column(Text, nullable=False)  # JSON list of ids
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
