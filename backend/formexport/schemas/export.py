"""
Pydantic schemas for the export API.
"""
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from formexport.core.errors import InvalidRequest
from formexport.models.storage import ReservationStatus


class ExportType(str, Enum):
    SUBMISSIONS = "submissions"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


class ExportTemplate(str, Enum):
    FLATTENED_WITH_BLANK_OUT = "flattenedWithBlankOut"
    FLATTENED_WITH_FILLED = "flattenedWithFilled"
    UNFLATTENED = "unflattened"


CONTENT_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


class ExportPreference(BaseModel):
    """Date range for an export: min_date inclusive, max_date exclusive."""

    model_config = ConfigDict(populate_by_name=True)

    min_date: Optional[datetime] = Field(default=None, alias="minDate")
    max_date: Optional[datetime] = Field(default=None, alias="maxDate")

    @field_validator("min_date", "max_date")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # created_at is stored as naive UTC
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class ExportRequest(BaseModel):
    """Parsed export request parameters."""

    model_config = ConfigDict(populate_by_name=True)

    type: ExportType = ExportType.SUBMISSIONS
    format: ExportFormat = ExportFormat.CSV
    template: ExportTemplate = ExportTemplate.FLATTENED_WITH_FILLED
    version: Optional[int] = None
    columns: Optional[List[str]] = None
    preference: Optional[ExportPreference] = None
    deleted: bool = False
    drafts: bool = False

    @field_validator("preference", mode="before")
    @classmethod
    def parse_preference(cls, v: Any) -> Any:
        # Query strings carry the preference as JSON text
        if isinstance(v, str):
            return json.loads(v) if v.strip() else None
        return v

    @field_validator("columns", mode="before")
    @classmethod
    def parse_columns(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [c.strip() for c in v.split(",") if c.strip()]
        return v

    @classmethod
    def parse(cls, params: Optional[Dict[str, Any]] = None) -> "ExportRequest":
        """
        Build a request from raw parameters, dropping empty values so defaults apply.

        Raises:
            InvalidRequest: If a type, format, template or other value is not recognised
        """
        if isinstance(params, ExportRequest):
            return params

        raw = {key: value for key, value in (params or {}).items() if value is not None and value != ""}
        try:
            return cls.model_validate(raw)
        except (ValidationError, ValueError) as e:
            raise InvalidRequest(
                f"Could not create an export for this form. Invalid options provided: {e}", cause=e
            ) from e


class ExportFieldsRequest(BaseModel):
    """Body of POST /forms/{form_id}/export/fields."""

    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = None
    format: Optional[str] = None
    template: Optional[str] = None
    version: Optional[int] = None
    columns: Optional[List[str]] = None
    preference: Optional[Any] = None
    deleted: Optional[bool] = None
    drafts: Optional[bool] = None


class FormFieldsResponse(BaseModel):
    """Schema field paths of a form version."""

    form_id: str
    version: int
    fields: List[str]


class ReservationResponse(BaseModel):
    """A file storage reservation."""

    id: str
    file_id: Optional[str] = None
    ready: bool
    status: ReservationStatus
    error: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
