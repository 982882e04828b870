"""Support ticket schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class TicketCreate(BaseModel):
    """Open a support ticket"""
    restaurant_id: UUID
    subject: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=1)
    category: Optional[str] = None
    priority: str = Field("medium", pattern="^(low|medium|high|urgent)$")


class TicketStatusUpdate(BaseModel):
    """Change ticket status"""
    status: str = Field(..., pattern="^(open|in_progress|resolved|closed)$")


class TicketMessageCreate(BaseModel):
    """Reply on a ticket"""
    message: str = Field(..., min_length=1)


class TicketMessageResponse(BaseModel):
    """Ticket message"""
    id: UUID
    user_id: Optional[UUID]
    message: str
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TicketResponse(BaseModel):
    """Support ticket"""
    id: UUID
    restaurant_id: UUID
    user_id: Optional[UUID]
    subject: str
    description: str
    category: Optional[str]
    priority: str
    status: str
    resolved_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TicketDetailResponse(TicketResponse):
    """Ticket with its conversation"""
    messages: List[TicketMessageResponse]


class TicketStats(BaseModel):
    """Ticket counts by status"""
    total: int
    open: int
    in_progress: int
    resolved: int
