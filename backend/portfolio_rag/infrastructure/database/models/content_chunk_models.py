"""SQLAlchemy ORM model for content chunks with pgvector embeddings."""

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB

from pgvector.sqlalchemy import Vector

from portfolio_rag.infrastructure.database.base import Base

EMBEDDING_DIMENSIONS = 1536  # text-embedding-3-small


class ContentChunkModel(Base):
    """A chunk of indexed portfolio content with its embedding.

    Rows are written per source ``(source_type, source_id)`` and replaced
    as a set whenever the source is re-indexed.
    """

    __tablename__ = "content_chunks"

    id = Column(
        String(36),
        primary_key=True,
        server_default=text("gen_random_uuid()::text"),
    )
    content = Column(Text, nullable=False)
    embedding = Column(Vector(EMBEDDING_DIMENSIONS), nullable=False)
    source_type = Column(String(30), nullable=False)  # project | blog | skill | experience
    source_id = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    metadata_ = Column("metadata", JSONB, nullable=False, server_default="{}")
    chunk_index = Column(Integer, nullable=False)
    token_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("source_type", "source_id", "chunk_index", name="uq_chunk_position"),
        Index("idx_chunks_source", "source_type", "source_id"),
        Index("idx_chunks_type_category", "source_type", "category"),
        Index("idx_chunks_source_id", "source_id"),
        Index("idx_chunks_embedding_hnsw", embedding, postgresql_using="hnsw",
              postgresql_ops={"embedding": "vector_cosine_ops"}),
    )
