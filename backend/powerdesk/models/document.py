from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, JSON, DateTime, text

from .authz import Base  # reuse same metadata


class Document(Base):
    """One JSON document of the realtime store, addressed by its slash path."""
    __tablename__ = 'documents'
    path: Mapped[str] = mapped_column(String(255), primary_key=True)
    parent: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(128), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))
