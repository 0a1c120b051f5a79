"""Database models for the Webmaster Tools CLI."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class SessionValue(Base):
    """Interim values kept between the legs of the OAuth handshake."""

    __tablename__ = "oauth_session_values"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(255), unique=True, index=True, nullable=False)
    value = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AccessToken(Base):
    __tablename__ = "oauth_access_tokens"

    id = Column(Integer, primary_key=True, index=True)
    consumer_key = Column(String(255), index=True, nullable=False)
    token = Column(String(500), nullable=False)
    token_secret = Column(String(500), nullable=False)
    scope = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
