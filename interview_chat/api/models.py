"""
Pydantic models for the completion relay API contract
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CompleteInterviewRequest(BaseModel):
    """
    Body of POST /api/complete-interview

    Fields are optional at the schema level so that missing values produce
    the relay's own 400 answer instead of a validation error.
    """
    session_id: Optional[str] = Field(default=None, description="Composite session key")
    user_id: Optional[str] = Field(default=None, description="Account id")
    email: Optional[str] = Field(default=None, description="Contact identity")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "session_id": "user-456+jane@example.com",
                    "user_id": "user-456",
                    "email": "jane@example.com"
                }
            ]
        }
    }


class ParsedSession(BaseModel):
    user_id: str
    email: str
    session_id: str


class CompleteInterviewResponse(BaseModel):
    """Successful completion"""
    success: bool = True
    message: str
    data: Any = None
    steps: Dict[str, bool] = Field(default_factory=dict)
    parsed_data: Optional[ParsedSession] = None


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    """
    Health check response

    Attributes:
        status: Service health status
        service: Service name
        version: API version
    """
    status: str = Field(..., description="Health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="API version")
