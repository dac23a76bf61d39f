"""
Pytest fixtures for API integration tests.

Provides the FastAPI test client with database and export service
dependency overrides.
"""
import pytest
from fastapi.testclient import TestClient

from formexport.api.deps import get_export_service
from formexport.core.database import get_db
from formexport.main import app


@pytest.fixture(scope="function")
def client(db_session, export_service):
    """
    FastAPI test client with dependency overrides.

    Uses the in-memory database and the inline task runner, so reservations
    are fulfilled before the response is sent.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_export_service] = lambda: export_service

    with TestClient(app) as test_client:
        yield test_client

    # Clean up override
    app.dependency_overrides.clear()
