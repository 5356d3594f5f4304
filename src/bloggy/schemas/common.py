"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field

from bloggy.core.errors import MessageType


class Message(BaseModel):
    """User-facing notice a view layer can render as an alert."""

    type: MessageType = Field(..., description="info, success, warning or danger")
    text: str = Field(..., description="Human-readable message")


class MessageResponse(BaseModel):
    """Response carrying only a message."""

    message: Message
