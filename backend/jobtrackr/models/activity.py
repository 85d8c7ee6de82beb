"""
Activity Models - applications, interviews and documents

These are the user records the gamification engine reads. The engine never
writes to them; CRUD for these resources lives outside this service.

Status Flow (applications):
    pending → in_progress → accepted/rejected
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from jobtrackr.database import Base
import uuid


class Application(Base):
    """
    Job application entity.

    Attributes:
        id: UUID primary key
        user_id: Owner identifier (indexed)
        company_id: Optional company reference
        title: Position applied for
        status: pending, in_progress, accepted or rejected (indexed)
    """

    __tablename__ = "applications"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    company_id = Column(String, nullable=True)
    title = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    application_id = Column(
        String, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String(500), nullable=False)
    scheduled_at = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="scheduled")
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class Document(Base):
    """
    CV or cover letter written by the user.

    Attributes:
        type: "cv" or "cover_letter"
        content: Document body (markdown or plain text)
    """

    __tablename__ = "documents"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    type = Column(String(20), nullable=False)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (Index("idx_documents_user_type", "user_id", "type"),)
