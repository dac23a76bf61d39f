"""
Forms, form versions and submissions.

These tables belong to the host forms service; the export pipeline only
reads them.
"""
import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from formexport.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Form(Base):
    __tablename__ = "forms"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    enable_status_updates = Column(Boolean, default=False, nullable=False)  # Adds status/assignee export columns
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    versions = relationship("FormVersion", back_populates="form", cascade="all, delete-orphan")


class FormVersion(Base):
    __tablename__ = "form_versions"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_id = Column(String(36), ForeignKey("forms.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    schema = Column(JSON, nullable=False, default=dict)  # form.io style {"components": [...]}
    published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    form = relationship("Form", back_populates="versions")
    submissions = relationship("Submission", back_populates="form_version")

    __table_args__ = (
        UniqueConstraint("form_id", "version", name="uq_form_versions_form_version"),
    )


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_id = Column(String(36), ForeignKey("forms.id"), nullable=False)
    form_version_id = Column(String(36), ForeignKey("form_versions.id"), nullable=False)
    confirmation_id = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(String, nullable=True)

    # Submitter
    full_name = Column(String, nullable=True)
    username = Column(String, nullable=True)
    email = Column(String, nullable=True)

    # Status tracking (only exported when the form enables status updates)
    status = Column(String, nullable=True)
    assignee = Column(String, nullable=True)
    assignee_email = Column(String, nullable=True)

    deleted = Column(Boolean, default=False, nullable=False)
    draft = Column(Boolean, default=False, nullable=False)

    submission = Column(JSON, nullable=False, default=dict)  # Submitted form data

    # Relationships
    form_version = relationship("FormVersion", back_populates="submissions")

    __table_args__ = (
        Index("idx_submissions_form_created", "form_id", "created_at"),
    )
