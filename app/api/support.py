"""Support ticket API endpoints"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.database import get_db
from app.models.support import SupportTicket, TicketMessage
from app.models.user import User, RestaurantUser
from app.schemas.support import (
    TicketCreate,
    TicketStatusUpdate,
    TicketMessageCreate,
    TicketMessageResponse,
    TicketResponse,
    TicketDetailResponse,
    TicketStats,
)
from app.api.auth import get_current_active_user, require_super_admin, verify_restaurant_access

router = APIRouter()
logger = structlog.get_logger()

PRIORITY_ORDER = case(
    (SupportTicket.priority == "urgent", 1),
    (SupportTicket.priority == "high", 2),
    (SupportTicket.priority == "medium", 3),
    else_=4,
)


async def get_ticket(db: AsyncSession, ticket_id: UUID, current_user: User) -> SupportTicket:
    """Load a ticket with messages, checking the user may see it"""
    result = await db.execute(
        select(SupportTicket)
        .where(SupportTicket.id == ticket_id)
        .options(selectinload(SupportTicket.messages))
    )
    ticket = result.scalar_one_or_none()
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket introuvable")

    await verify_restaurant_access(db, ticket.restaurant_id, current_user)
    return ticket


@router.post("/tickets", response_model=TicketResponse, status_code=201)
async def create_ticket(
    ticket_data: TicketCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Open a ticket for one of the user's restaurants"""
    await verify_restaurant_access(db, ticket_data.restaurant_id, current_user)

    ticket = SupportTicket(user_id=current_user.id, status="open", **ticket_data.model_dump())
    db.add(ticket)
    await db.commit()
    await db.refresh(ticket)

    logger.info("Support ticket opened", ticket_id=str(ticket.id), priority=ticket.priority)
    return ticket


@router.get("/tickets", response_model=List[TicketResponse])
async def list_tickets(
    status: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """All tickets for platform admins, the user's restaurants' tickets otherwise"""
    query = select(SupportTicket)

    if current_user.is_super_admin:
        query = query.order_by(PRIORITY_ORDER, SupportTicket.created_at.desc())
    else:
        restaurant_ids = select(RestaurantUser.restaurant_id).where(
            RestaurantUser.user_id == current_user.id
        )
        query = query.where(SupportTicket.restaurant_id.in_(restaurant_ids)).order_by(
            SupportTicket.created_at.desc()
        )

    if status:
        query = query.where(SupportTicket.status == status)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/stats", response_model=TicketStats)
async def get_ticket_stats(
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Ticket counts by status"""
    result = await db.execute(
        select(SupportTicket.status, func.count(SupportTicket.id)).group_by(SupportTicket.status)
    )
    counts = {status: count for status, count in result.all()}

    return TicketStats(
        total=sum(counts.values()),
        open=counts.get("open", 0),
        in_progress=counts.get("in_progress", 0),
        resolved=counts.get("resolved", 0),
    )


@router.get("/tickets/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket_detail(
    ticket_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Ticket with its conversation"""
    return await get_ticket(db, ticket_id, current_user)


@router.post("/tickets/{ticket_id}/messages", response_model=TicketMessageResponse, status_code=201)
async def add_ticket_message(
    ticket_id: UUID,
    message_data: TicketMessageCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Reply on a ticket"""
    ticket = await get_ticket(db, ticket_id, current_user)

    message = TicketMessage(
        ticket_id=ticket.id,
        user_id=current_user.id,
        message=message_data.message,
        is_admin=current_user.is_super_admin,
    )
    ticket.messages.append(message)
    ticket.updated_at = datetime.utcnow()
    await db.commit()

    return message


@router.patch("/tickets/{ticket_id}/status", response_model=TicketResponse)
async def update_ticket_status(
    ticket_id: UUID,
    status_data: TicketStatusUpdate,
    current_user: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Move a ticket through open, in progress, resolved and closed"""
    ticket = await get_ticket(db, ticket_id, current_user)

    ticket.status = status_data.status
    if status_data.status == "resolved":
        ticket.resolved_at = datetime.utcnow()
    await db.commit()

    logger.info("Support ticket updated", ticket_id=str(ticket.id), status=ticket.status)
    return ticket
