"""
Shared pytest fixtures.

Provides an in-memory database, a blob store in a temp directory, an inline
task runner and sample forms with submissions.
"""
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from formexport.adapters.repositories_sql import SQLExportJobsRepo
from formexport.adapters.storage_local import LocalBlobStore
from formexport.adapters.tasks_inline import InlineTaskRunner
from formexport.core.database import Base
from formexport.models import Form, FormVersion, Submission
from formexport.services.export_jobs_service import ExportJobsService
from formexport.services.export_service import ExportService
from formexport.services.reservation_service import ReservationService
from formexport.services.storage_service import StorageService


# Test database setup (in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


SAMPLE_SCHEMA = {
    "components": [
        {"key": "name", "type": "textfield", "input": True},
        {
            "type": "columns",
            "columns": [
                {"components": [{"key": "age", "type": "number", "input": True}]},
                {"components": [{"key": "agree", "type": "checkbox", "input": True}]},
            ],
        },
        {
            "key": "pets",
            "type": "datagrid",
            "input": True,
            "components": [
                {"key": "kind", "type": "textfield", "input": True},
            ],
        },
        {"key": "submit", "type": "button", "input": True},
    ]
}


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.

    Creates all tables, yields session, then drops all tables.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """Session factory background tasks open their own sessions from."""
    return TestingSessionLocal


@pytest.fixture
def blob_store(tmp_path):
    """Blob store writing under a per-test temp directory."""
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def task_runner():
    """Task runner that executes background exports immediately."""
    return InlineTaskRunner(mode="inline")


@pytest.fixture
def storage_service(db_session, blob_store):
    return StorageService(db_session, blob_store)


@pytest.fixture
def reservation_service(db_session, storage_service):
    return ReservationService(db_session, storage_service, SQLExportJobsRepo(db_session))


@pytest.fixture
def export_jobs_service(db_session, reservation_service):
    return ExportJobsService(db_session, SQLExportJobsRepo(db_session), reservation_service)


@pytest.fixture
def export_service(db_session, session_factory, blob_store, task_runner):
    return ExportService(
        db_session,
        session_factory=session_factory,
        blob_store=blob_store,
        task_runner=task_runner,
    )


@pytest.fixture
def sample_form(db_session):
    """
    A form with one published version and three submissions.

    Submissions (oldest first):
    - C-1: active, two pets
    - C-2: active, no pets
    - C-3: soft-deleted

    Returns: (Form, FormVersion)
    """
    form = Form(name="Pet Survey", enable_status_updates=False)
    db_session.add(form)
    db_session.flush()

    version = FormVersion(form_id=form.id, version=1, schema=SAMPLE_SCHEMA, published=True)
    db_session.add(version)
    db_session.flush()

    rows = [
        ("C-1", datetime(2024, 1, 1, 9, 0), False, {
            "name": "Ann", "age": 31, "agree": True,
            "pets": [{"kind": "cat"}, {"kind": "dog"}],
        }),
        ("C-2", datetime(2024, 1, 2, 9, 0), False, {
            "name": "Bob", "age": 40.0, "agree": False, "pets": [],
        }),
        ("C-3", datetime(2024, 1, 3, 9, 0), True, {
            "name": "Cid", "age": 22, "agree": True, "pets": [{"kind": "fish"}],
        }),
    ]
    for confirmation_id, created_at, deleted, data in rows:
        db_session.add(Submission(
            form_id=form.id,
            form_version_id=version.id,
            confirmation_id=confirmation_id,
            created_at=created_at,
            created_by="alice",
            full_name="Alice Example",
            username="alice",
            email="alice@example.com",
            deleted=deleted,
            draft=False,
            submission=data,
        ))

    db_session.commit()
    return form, version
