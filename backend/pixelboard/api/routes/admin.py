"""Administrative endpoints for reviewing pixel requests."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pixelboard.core.dependencies import get_admin_identity, get_db
from pixelboard.db.base import as_utc
from pixelboard.models.pixel_request import STATUS_CONFIRMED, STATUS_REJECTED, PixelRequest
from pixelboard.schemas.base import MessageResponse
from pixelboard.schemas.pixel_request import AdminRequestList, PixelRequestAdmin, StatusChange
from pixelboard.services import requests as request_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_admin_identity)])


def _request_to_admin(request: PixelRequest, effective_status: str) -> PixelRequestAdmin:
    return PixelRequestAdmin.model_validate(
        {
            "id": request.id,
            "pixels": request.pixels or {},
            "image_data": request.image_data,
            "image_position": request.image_position,
            "link": request.link,
            "text": request.text,
            "email": request.email,
            "telegram": request.telegram,
            "price": request.price,
            "pixel_count": request.pixel_count,
            "status": request.status,
            "created_at": as_utc(request.created_at),
            "updated_at": as_utc(request.updated_at or request.created_at),
            "effective_status": effective_status,
        }
    )


@router.post("/approve/{request_id}", response_model=MessageResponse)
async def approve_request(request_id: str, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    await request_service.transition(session, request_id, STATUS_CONFIRMED)
    await session.commit()
    return MessageResponse(message="Request approved successfully")


@router.post("/reject/{request_id}", response_model=MessageResponse)
async def reject_request(request_id: str, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    await request_service.transition(session, request_id, STATUS_REJECTED)
    await session.commit()
    return MessageResponse(message="Request rejected successfully")


@router.post("/change-status/{request_id}", response_model=MessageResponse)
async def change_request_status(
    request_id: str,
    payload: StatusChange,
    session: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await request_service.transition(session, request_id, payload.status)
    await session.commit()
    return MessageResponse(message=f"Request status changed to {payload.status} successfully")


@router.get("/requests", response_model=AdminRequestList)
async def list_requests(session: AsyncSession = Depends(get_db)) -> AdminRequestList:
    rows = await request_service.list_all(session)
    return AdminRequestList(data=[_request_to_admin(request, status) for request, status in rows])


@router.delete("/requests/{request_id}", response_model=MessageResponse)
async def delete_request(request_id: str, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    await request_service.delete_request(session, request_id)
    await session.commit()
    return MessageResponse(message="Request deleted successfully")
