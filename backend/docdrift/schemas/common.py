"""Shared schema configuration and error payloads."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Response schema that reads ORM attributes."""

    model_config = ConfigDict(from_attributes=True)


class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: datetime


class ErrorDetail(BaseModel):
    """One invalid field."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Error body with a machine-readable code."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None

    @classmethod
    def from_field_errors(cls, code: str, message: str, errors: dict[str, str]) -> "ErrorResponse":
        return cls(
            code=code,
            message=message,
            details=[ErrorDetail(field=field, message=msg) for field, msg in errors.items()],
        )
