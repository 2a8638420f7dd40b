"""Pydantic schemas for API request/response models."""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from models.migration import MigrationResult

__all__ = [
    'ApplySchemaRequest',
    'MigrationResultResponse',
    'ErrorDetail',
    'ErrorResponse',
    'HealthResponse',
]


class ApplySchemaRequest(BaseModel):
    """Body of POST /api/projects/{project_id}/schema."""
    sql: str = Field(..., description="Multi-statement SQL script to apply")


class MigrationResultResponse(BaseModel):
    """Serialized outcome of one migration run."""
    success: bool
    tables_created: List[str] = Field(default_factory=list)
    rows_inserted: int = 0
    statements_run: int = 0
    execution_time: float = Field(0.0, description="Wall-clock seconds")
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: MigrationResult) -> "MigrationResultResponse":
        return cls(**result.to_dict())


class ErrorDetail(BaseModel):
    """Error information."""
    code: str
    message: str
    details: Optional[str] = None
    result: Optional[MigrationResultResponse] = None


class ErrorResponse(BaseModel):
    """API error envelope."""
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: datetime
    service: str
    version: str
