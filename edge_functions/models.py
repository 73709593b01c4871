"""
Request and response models for the edge functions.

Request bodies are parsed inside the handlers rather than by FastAPI so that
malformed input is reported after authentication, as a 400, and within the
response timing floor.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from edge_functions.errors import InvalidInput

ModelT = TypeVar("ModelT", bound=BaseModel)


class BookStatus(str, Enum):
    """Review decisions that trigger an owner notice."""
    APPROVED = "approved"
    REJECTED = "rejected"


class CamelModel(BaseModel):
    """Accepts the camelCase keys sent by the web client."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DeleteUserRequest(CamelModel):
    user_id: Optional[str] = Field(None, alias="userId", description="Account to delete")
    admin_password: Optional[str] = Field(None, alias="adminPassword", description="Caller's own password")


class WelcomeEmailRequest(CamelModel):
    email: Optional[str] = Field(None, description="Recipient; must be the caller's own address")
    display_name: Optional[str] = Field(None, alias="displayName", description="Name used in the greeting")


class BookStatusEmailRequest(CamelModel):
    book_id: Optional[str] = Field(None, alias="bookId")
    book_title: Optional[str] = Field(None, alias="bookTitle")
    status: Optional[str] = Field(None, description="approved or rejected")
    user_id: Optional[str] = Field(None, alias="userId", description="Owning identity")


class ReviewBookRequest(CamelModel):
    book_id: Optional[str] = Field(None, alias="bookId")
    status: Optional[str] = Field(None, description="approved or rejected")


class DeleteUserResponse(BaseModel):
    success: bool = Field(True)
    message: str = Field(..., description="Confirmation message")


class BookStatusEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(True)
    email_response: Dict[str, Any] = Field(..., alias="emailResponse")


class NotificationResult(BaseModel):
    sent: bool = Field(..., description="Whether the owner notice was accepted by the provider")
    error: Optional[str] = Field(None, description="Why the notice was not sent")


class ReviewBookResponse(BaseModel):
    success: bool = Field(True)
    book: Dict[str, Any] = Field(..., description="Updated book row")
    notification: NotificationResult


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details (debug only)")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")


async def read_json_body(request: Request, model: Type[ModelT]) -> ModelT:
    """
    Parse the request body into model.

    Raises:
        InvalidInput: If the body is not a JSON object or fails validation
    """
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidInput("Request body must be valid JSON")

    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")

    try:
        return model.model_validate(payload)
    except ValidationError:
        raise InvalidInput("Request body has invalid field types")
