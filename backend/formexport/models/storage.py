"""
File storage metadata, reservations and the submissions export ledger.
"""
import enum
import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint,
)
from formexport.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class FileStorage(Base):
    """Metadata row for a blob held by the blob store."""

    __tablename__ = "file_storage"

    id = Column(String(36), primary_key=True, default=_uuid)
    original_name = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    storage = Column(String, nullable=False)  # Blob store backend, e.g. "local"
    path = Column(String, nullable=False)  # Backend-specific location
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class FileStorageReservation(Base):
    """
    Placeholder for an export artifact.

    Created pending with no file; becomes ready exactly once, when the
    artifact has been stored and file_id points at it. A failed export
    records its error instead and never becomes ready.

    version_id is bumped on every UPDATE and checked by the ORM, so an
    update racing a release fails instead of writing to a deleted row.
    """

    __tablename__ = "file_storage_reservations"

    id = Column(String(36), primary_key=True, default=_uuid)
    file_id = Column(String(36), nullable=True)  # file_storage.id once fulfilled
    ready = Column(Boolean, default=False, nullable=False)
    status = Column(SQLEnum(ReservationStatus), default=ReservationStatus.PENDING, nullable=False)
    error = Column(Text, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("idx_reservations_file", "file_id"),
        Index("idx_reservations_created_by", "created_by"),
    )


class SubmissionsExport(Base):
    """
    Ledger row linking a (form, form version) export job to its reservation.

    At most one row per (form, form version): concurrent requests for the same
    export collapse onto the reservation of whichever insert wins.
    """

    __tablename__ = "submissions_exports"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_id = Column(String(36), ForeignKey("forms.id"), nullable=False)
    form_version_id = Column(String(36), ForeignKey("form_versions.id"), nullable=False)
    reservation_id = Column(String(36), ForeignKey("file_storage_reservations.id"), nullable=False, index=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_by = Column(String, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("form_id", "form_version_id", name="uq_submissions_exports_form_version"),
    )
