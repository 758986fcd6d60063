from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, Any, Dict

DataType = TypeVar("DataType")

class APIResponse(BaseModel, Generic[DataType]):
    """Envelope for every successful JSON response."""
    message: str = Field(..., description="Short human-readable outcome, e.g. 'Progress recorded successfully'.")
    data: Optional[DataType] = Field(None, description="Payload; null for acknowledgements.")

class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable machine code derived from the HTTP status, e.g. CONFLICT.")
    message: str = Field(..., description="Human-readable reason, e.g. 'Course not completed yet'.")
    details: Optional[Dict[str, Any]] = Field(None, description="Extra context such as validation_errors.")

class ErrorResponse(BaseModel):
    """Envelope for every error response, including request validation failures."""
    error: ErrorDetail
    timestamp: str = Field(..., description="UTC ISO 8601 time the error was produced.")
    path: str = Field(..., description="Requested URL.")
    request_id: Optional[str] = Field(None, description="Matches the X-Request-ID response header.")
