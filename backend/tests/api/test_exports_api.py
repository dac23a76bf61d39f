"""
API Integration Tests for Export Endpoints.

Tests the /api/v1/forms/{form_id}/export* and /api/v1/reservations/*
endpoints, including error-to-status mapping.
"""
import json
from unittest.mock import patch

import pytest
from fastapi import status

from formexport.core.errors import StorageFailure


@pytest.mark.api
class TestExportsAPI:
    """Test suite for direct export endpoints."""

    def test_export_json(self, client, sample_form):
        form, _ = sample_form

        response = client.get(f"/api/v1/forms/{form.id}/export", params={"format": "json"})

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "application/json"
        assert response.headers["content-disposition"] == 'attachment; filename="pet_survey_submissions.json"'
        data = response.json()
        assert [r["form"]["confirmationId"] for r in data] == ["C-1", "C-2"]

    def test_export_csv_with_query_params(self, client, sample_form):
        form, _ = sample_form

        response = client.get(
            f"/api/v1/forms/{form.id}/export",
            params={
                "format": "csv",
                "template": "flattenedWithBlankOut",
                "columns": "name,pets.kind",
                "preference": json.dumps({"minDate": "2024-01-01T00:00:00"}),
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip("\n").split("\n")
        assert lines[0].endswith("name,pets.kind")
        assert len(lines) == 4  # header + C-1 (two pets) + C-2

    def test_export_fields_body(self, client, sample_form):
        form, _ = sample_form

        response = client.post(
            f"/api/v1/forms/{form.id}/export/fields",
            json={"format": "csv", "template": "unflattened", "columns": ["name"]},
        )

        assert response.status_code == status.HTTP_200_OK
        header = response.text.split("\n", 1)[0].split(",")
        assert [h for h in header if not h.startswith("form.")] == ["name"]

    def test_invalid_format(self, client, sample_form):
        form, _ = sample_form

        response = client.get(f"/api/v1/forms/{form.id}/export", params={"format": "xml"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "detail" in response.json()

    def test_unknown_form(self, client):
        response = client.get("/api/v1/forms/does-not-exist/export")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_csv_export_fields(self, client, sample_form):
        form, _ = sample_form

        response = client.get(f"/api/v1/forms/{form.id}/csvexport/fields")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "form_id": form.id,
            "version": 1,
            "fields": ["name", "age", "agree", "pets.kind", "submit"],
        }


@pytest.mark.api
class TestReservationsAPI:
    """Test suite for export-with-reservation endpoints."""

    def test_reservation_lifecycle(self, client, sample_form):
        form, _ = sample_form

        response = client.post(
            f"/api/v1/forms/{form.id}/export/reservation",
            json={"format": "csv"},
            headers={"X-Username": "alice"},
        )
        assert response.status_code == status.HTTP_202_ACCEPTED
        reservation = response.json()
        assert reservation["ready"] is True
        assert reservation["status"] == "ready"
        assert reservation["created_by"] == "alice"

        read = client.get(f"/api/v1/reservations/{reservation['id']}")
        assert read.status_code == status.HTTP_200_OK
        assert read.json()["file_id"] == reservation["file_id"]

        listed = client.get("/api/v1/reservations", params={"created_by": "alice"})
        assert [r["id"] for r in listed.json()] == [reservation["id"]]

        download = client.get(f"/api/v1/reservations/{reservation['id']}/file")
        assert download.status_code == status.HTTP_200_OK
        assert download.headers["content-disposition"] == 'attachment; filename="pet_survey_submissions.csv"'
        assert download.text.startswith("form.confirmationId,")

        released = client.delete(f"/api/v1/reservations/{reservation['id']}")
        assert released.status_code == status.HTTP_204_NO_CONTENT

        gone = client.get(f"/api/v1/reservations/{reservation['id']}")
        assert gone.status_code == status.HTTP_404_NOT_FOUND

    def test_reservation_without_body(self, client, sample_form):
        form, _ = sample_form

        response = client.post(f"/api/v1/forms/{form.id}/export/reservation")

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json()["created_by"] == "anonymous"

    def test_failed_export_is_not_downloadable(self, client, sample_form, blob_store):
        form, _ = sample_form

        with patch.object(blob_store, "upload", side_effect=StorageFailure("disk full")):
            response = client.post(f"/api/v1/forms/{form.id}/export/reservation", json={})

        reservation = response.json()
        assert reservation["status"] == "failed"

        download = client.get(f"/api/v1/reservations/{reservation['id']}/file")
        assert download.status_code == status.HTTP_409_CONFLICT

    def test_release_storage_failure(self, client, sample_form, blob_store):
        form, _ = sample_form
        reservation = client.post(f"/api/v1/forms/{form.id}/export/reservation", json={}).json()

        with patch.object(blob_store, "delete", return_value=False):
            response = client.delete(f"/api/v1/reservations/{reservation['id']}")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert client.get(f"/api/v1/reservations/{reservation['id']}").status_code == status.HTTP_200_OK

    def test_unknown_reservation(self, client, db_session):
        assert client.get("/api/v1/reservations/missing").status_code == status.HTTP_404_NOT_FOUND
        assert client.delete("/api/v1/reservations/missing").status_code == status.HTTP_404_NOT_FOUND


def test_health(client, tmp_path):
    with patch("formexport.api.health.settings.STORAGE_PATH", str(tmp_path)):
        response = client.get("/api/v1/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "healthy", "database": "connected", "storage": "writable"}
