"""
Pydantic Schemas for Request/Response Validation

Records themselves are free-form: the store accepts whatever fields a
form sends, so they travel as plain dicts. These schemas describe the
envelopes around them.

Author: Your Name
Version: 1.0.0
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class Resource(str, Enum):
    RESERVATIONS = "reservations"
    REVIEWS = "reviews"


class ExportFormat(str, Enum):
    JSON = "json"
    XLSX = "xlsx"


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class LoginRequest(BaseModel):
    """Admin login form."""
    username: str = Field(..., examples=["admin"])
    password: str = Field(..., examples=["admin123"])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class WriteConfirmation(BaseModel):
    """Response after saving a record."""
    success: bool
    message: str
    data: dict[str, Any]


class SessionResponse(BaseModel):
    """Admin session state."""
    authenticated: bool
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    environment: str
    storage: str
    notifications: str
    baseline_source: str
    timestamp: datetime
