from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Text
from sqlalchemy.orm import DeclarativeBase
import datetime
import secrets


class Base(DeclarativeBase):
    pass


def new_document_id() -> str:
    """Random 20-character id, the same shape as document-store auto ids."""
    return secrets.token_urlsafe(15)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Account(Base):
    """Credentials held by the identity provider."""

    __tablename__ = "accounts"

    uid = Column(String, primary_key=True, default=new_document_id)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    tokens_valid_after = Column(Integer, default=0)  # epoch seconds
    created_at = Column(DateTime, default=utcnow)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)  # identity uid
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True, default=new_document_id)
    role = Column(String, nullable=False)
    level = Column(String, nullable=False)
    type = Column(String, nullable=False)
    techstack = Column(JSON, nullable=False)  # list of strings
    questions = Column(JSON, nullable=False)  # list of strings
    user_id = Column(String, nullable=False, index=True)
    finalized = Column(Boolean, default=False)
    cover_image = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(String, primary_key=True, default=new_document_id)
    interview_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    total_score = Column(Integer, nullable=False)
    category_scores = Column(JSON, nullable=False)  # list of {name, score, comment}
    strengths = Column(JSON, nullable=False)
    areas_for_improvement = Column(JSON, nullable=False)
    final_assessment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)
