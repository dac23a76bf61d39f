"""
Shared API dependencies.
"""
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from formexport.core.database import SessionLocal, get_db
from formexport.core.task_runner import get_blob_store, get_task_runner
from formexport.services.export_service import ExportService


def get_current_user(x_username: str = Header("anonymous", alias="X-Username")) -> str:
    """
    Acting user for audit columns (created_by / updated_by).

    Hosts with their own identity layer override this dependency.
    """
    return x_username


def get_export_service(db: Session = Depends(get_db)) -> ExportService:
    """ExportService bound to the request session and the shared runner/storage."""
    return ExportService(
        db,
        session_factory=SessionLocal,
        blob_store=get_blob_store(),
        task_runner=get_task_runner(),
    )
